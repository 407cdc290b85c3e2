"""Custom exception hierarchy for amxxpack.

This module defines the exception classes used throughout amxxpack:
- AmxxpackError: Base exception for all amxxpack errors
- PathResolutionError: Raised when no base directory contains a file
- CompilationError: Raised when the compiler reports a failure
- CompilerNotFoundError: Raised when the compiler executable is missing
- ConfigurationError: Raised when the project config cannot be loaded
- WatcherError: Raised when a directory watch cannot be started

User-facing messages are safe to print as a single log line; technical
details are logged internally via structlog.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from amxxpack.compiler.models import CompileResult

logger = structlog.get_logger(__name__)


class AmxxpackError(Exception):
    """Base exception for amxxpack.

    Args:
        user_message: Message to display to the user.
        internal_details: Optional technical details. Logged internally,
            never part of the displayed message.

    Example:
        >>> raise AmxxpackError(
        ...     "Cannot copy asset",
        ...     internal_details="errno 13 on dist/sound/foo.wav"
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "amxxpack_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class PathResolutionError(AmxxpackError):
    """Raised when a file is not inside any of the configured base directories.

    This is a misconfiguration, not a transient condition: the operation
    that asked for the relative path must fail rather than guess.

    Attributes:
        target: The path that could not be resolved.
        base_paths: The candidate base directories, in lookup order.

    Example:
        >>> raise PathResolutionError(
        ...     "asset",
        ...     Path("/tmp/foo.wad"),
        ...     [Path("assets")],
        ... )
        # User sees: 'Cannot find relative path for asset "/tmp/foo.wad"'
    """

    def __init__(
        self,
        kind: str,
        target: Path,
        base_paths: Sequence[Path],
        *,
        internal_details: str | None = None,
    ) -> None:
        user_message = f'Cannot find relative path for {kind} "{target.as_posix()}"'
        super().__init__(user_message, internal_details=internal_details)

        self.kind = kind
        self.target = target
        self.base_paths = list(base_paths)


class CompilationError(AmxxpackError):
    """Raised when the compiler reports a non-success outcome.

    Attributes:
        source: Script that failed to compile.
        result: The CompileResult produced by the compiler, if any.

    Example:
        >>> raise CompilationError(
        ...     Path("src/scripts/test.sma"),
        ...     "1 Error.",
        ... )
        # User sees: 'Failed to compile src/scripts/test.sma : "1 Error."'
    """

    def __init__(
        self,
        source: Path | str,
        reason: str | None,
        *,
        result: CompileResult | None = None,
        internal_details: str | None = None,
    ) -> None:
        source_str = source.as_posix() if isinstance(source, Path) else source
        super().__init__(
            f'Failed to compile {source_str} : "{reason or "unknown error"}"',
            internal_details=internal_details,
        )

        self.source = source
        self.reason = reason
        self.result = result


class CompilerNotFoundError(CompilationError):
    """Raised when the compiler executable cannot be started.

    Attributes:
        executable: Path of the missing executable.
    """

    def __init__(
        self,
        source: Path | str,
        executable: Path,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            source,
            f"compiler not found at {executable.as_posix()}",
            internal_details=internal_details,
        )

        self.executable = executable


class ConfigurationError(AmxxpackError):
    """Raised when the project configuration cannot be read or validated.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "input.scripts").

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid compiler settings",
        ...     file_path=".amxxpack.json",
        ...     field_path="compiler.dir",
        ... )
        # User sees: "Invalid compiler settings (in .amxxpack.json, field 'compiler.dir')"
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class WatcherError(AmxxpackError):
    """Raised when a directory watch cannot be started.

    Raised when:
    - The event source is iterated twice
    - The underlying observer fails to start
    """

    pass
