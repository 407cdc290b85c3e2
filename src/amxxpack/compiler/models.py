"""Compiler output models for amxxpack.

This module defines the result contract returned by the compiler wrapper:
- MessageType: Diagnostic severity
- DiagnosticMessage: One classified compiler line
- CompileResult: Outcome of compiling one script
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MessageType(str, Enum):
    """Severity of a compiler diagnostic.

    Attributes:
        FATAL_ERROR: Compilation stopped immediately
        ERROR: Compilation failed
        WARNING: Compilation continues
        ECHO: Informational output (``#echo`` directive)
    """

    FATAL_ERROR = "fatal error"
    ERROR = "error"
    WARNING = "warning"
    ECHO = "echo"

    @property
    def is_error(self) -> bool:
        """True for severities that fail the compilation."""
        return self in (MessageType.FATAL_ERROR, MessageType.ERROR)


class DiagnosticMessage(BaseModel):
    """A single diagnostic emitted by the compiler.

    Attributes:
        type: Message severity.
        code: Compiler message code (e.g. "017"), None for echo lines.
        text: Message text.
        filename: File the message refers to; None means the compiled script.
        start_line: Line number, if reported.
        end_line: Last line for ranged diagnostics (``file(5 -- 7)``).

    Example:
        >>> DiagnosticMessage(
        ...     type=MessageType.ERROR,
        ...     code="017",
        ...     text='undefined symbol "foo"',
        ...     filename="test.sma",
        ...     start_line=10,
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: MessageType
    code: str | None = None
    text: str
    filename: str | None = None
    start_line: int | None = Field(default=None, ge=0)
    end_line: int | None = Field(default=None, ge=0)


class CompileResult(BaseModel):
    """Result of compiling one script.

    Attributes:
        success: Compiler's verdict (not just the process exit code).
        plugin: Artifact file name relative to the destination dir (success only).
        error: Human-readable failure reason (failure only).
        messages: Diagnostics in the order the compiler emitted them.
        output: Raw combined compiler output.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool
    plugin: str | None = None
    error: str | None = None
    messages: tuple[DiagnosticMessage, ...] = Field(default=())
    output: str = ""

    @model_validator(mode="after")
    def _check_plugin(self) -> CompileResult:
        if self.success and not self.plugin:
            raise ValueError("successful compile result requires a plugin name")
        return self

    @property
    def error_count(self) -> int:
        """Number of error and fatal error messages."""
        return sum(1 for m in self.messages if m.type.is_error)

    @property
    def warning_count(self) -> int:
        """Number of warning messages."""
        return sum(1 for m in self.messages if m.type == MessageType.WARNING)
