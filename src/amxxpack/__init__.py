"""amxxpack: build pipeline for AMX Mod X projects.

This package provides:
- ProjectConfig: Pydantic schema for .amxxpack.json
- BuildOrchestrator / WatchOrchestrator: One-shot and incremental builds
- AmxxpcCompiler: amxxpc wrapper with diagnostic classification
- ConsoleLogger: Rich console log sink
"""

from __future__ import annotations

__version__ = "0.1.0"

from amxxpack.builder import (
    BatchResult,
    BatchStatus,
    BuildAbortedError,
    BuildOrchestrator,
    DirectorySynchronizer,
    ProjectActions,
    WatchOrchestrator,
)
from amxxpack.compiler import (
    AmxxpcCompiler,
    CompileResult,
    DiagnosticMessage,
    MessageType,
)
from amxxpack.config import BuildOptions, ProjectConfig, load_config
from amxxpack.errors import (
    AmxxpackError,
    CompilationError,
    CompilerNotFoundError,
    ConfigurationError,
    PathResolutionError,
    WatcherError,
)
from amxxpack.output import BuildLogger, ConsoleLogger
from amxxpack.paths import resolve_relative

__all__ = [
    "__version__",
    # Builder
    "BatchResult",
    "BatchStatus",
    "BuildAbortedError",
    "BuildOrchestrator",
    "DirectorySynchronizer",
    "ProjectActions",
    "WatchOrchestrator",
    # Compiler
    "AmxxpcCompiler",
    "CompileResult",
    "DiagnosticMessage",
    "MessageType",
    # Config
    "BuildOptions",
    "ProjectConfig",
    "load_config",
    # Errors
    "AmxxpackError",
    "CompilationError",
    "CompilerNotFoundError",
    "ConfigurationError",
    "PathResolutionError",
    "WatcherError",
    # Output
    "BuildLogger",
    "ConsoleLogger",
    "resolve_relative",
]
