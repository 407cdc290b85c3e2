"""Builder module for amxxpack.

This module exports the build pipeline:
- BuildOrchestrator: One-shot build of assets, includes and plugins
- WatchOrchestrator: Incremental rebuild on file changes
- ProjectActions: Single-file actions (copy script/include/asset, compile)
- DirectorySynchronizer: Pattern scanning, sequential apply, watch dispatch
- WatchdogEventSource: Default file event source
"""

from __future__ import annotations

from amxxpack.builder.actions import ProjectActions
from amxxpack.builder.constants import (
    ASSETS_PATH_PATTERN,
    DEFAULT_WATCH_INTERVAL,
    INCLUDE_PATH_PATTERN,
    SCRIPTS_PATH_PATTERN,
    WATCH_INTERVAL_ENV_VAR,
    get_watch_interval,
)
from amxxpack.builder.orchestrator import (
    BatchResult,
    BatchStatus,
    BuildAbortedError,
    BuildOrchestrator,
    FileOutcome,
    FileStatus,
    WatchOrchestrator,
)
from amxxpack.builder.sync import DirectorySynchronizer, scan_directories, sync_file
from amxxpack.builder.watcher import (
    FileEvent,
    FileEventKind,
    FileEventSource,
    WatchdogEventSource,
)

__all__ = [
    "ASSETS_PATH_PATTERN",
    "DEFAULT_WATCH_INTERVAL",
    "INCLUDE_PATH_PATTERN",
    "SCRIPTS_PATH_PATTERN",
    "WATCH_INTERVAL_ENV_VAR",
    "BatchResult",
    "BatchStatus",
    "BuildAbortedError",
    "BuildOrchestrator",
    "DirectorySynchronizer",
    "FileEvent",
    "FileEventKind",
    "FileEventSource",
    "FileOutcome",
    "FileStatus",
    "ProjectActions",
    "WatchOrchestrator",
    "WatchdogEventSource",
    "get_watch_interval",
    "scan_directories",
    "sync_file",
]
