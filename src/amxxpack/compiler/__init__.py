"""Compiler module for amxxpack.

This module exports the amxxpc wrapper and its result models:
- AmxxpcCompiler: Runs amxxpc and returns a CompileResult
- PluginCompiler: Protocol for compiler implementations
- CompileResult, DiagnosticMessage, MessageType: Result contract
- parse_output, parse_line: Compiler output classification
"""

from __future__ import annotations

from amxxpack.compiler.amxxpc import (
    PLUGIN_EXTENSION,
    AmxxpcCompiler,
    PluginCompiler,
    build_arguments,
)
from amxxpack.compiler.diagnostics import (
    ParsedOutput,
    format_message,
    log_message,
    parse_line,
    parse_output,
)
from amxxpack.compiler.models import CompileResult, DiagnosticMessage, MessageType

__all__ = [
    "PLUGIN_EXTENSION",
    "AmxxpcCompiler",
    "CompileResult",
    "DiagnosticMessage",
    "MessageType",
    "ParsedOutput",
    "PluginCompiler",
    "build_arguments",
    "format_message",
    "log_message",
    "parse_line",
    "parse_output",
]
