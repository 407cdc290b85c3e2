"""File event sources for watch mode.

This module hides the OS notification mechanism behind FileEventSource,
an async iterator of FileEvent(kind, path). The default implementation
wraps a watchdog Observer: its handler runs on the observer thread and
hands matching events to the event loop with ``call_soon_threadsafe``.

Architecture:
- FileEventKind / FileEvent: What happened to which file
- FileEventSource: Protocol consumed by DirectorySynchronizer.watch()
- WatchdogEventSource: Recursive watchdog observer over base directories
- _PatternEventHandler: Filters watchdog events by glob pattern

Usage:
    >>> source = WatchdogEventSource([Path("src/scripts")], "**/*.sma")
    >>> async for event in source:
    ...     print(event.kind, event.path)
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import AsyncIterator, Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple, Protocol

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent
from watchdog.observers import Observer

from amxxpack.errors import WatcherError
from amxxpack.paths import find_relative_path, matches_pattern

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = structlog.get_logger(__name__)


class FileEventKind(enum.Enum):
    """Kind of file event.

    Attributes:
        ADDED: File created (or moved into a watched directory)
        CHANGED: File contents modified
    """

    ADDED = "add"
    CHANGED = "change"


class FileEvent(NamedTuple):
    """A file event delivered to watch mode."""

    kind: FileEventKind
    path: Path


class FileEventSource(Protocol):
    """Lazy, infinite, non-restartable sequence of file events."""

    def __aiter__(self) -> AsyncIterator[FileEvent]: ...


EventSourceFactory = Callable[[Sequence[Path], str], FileEventSource]


def _decode(path: str | bytes) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8")
    return path


class _PatternEventHandler(FileSystemEventHandler):
    """Internal handler for watchdog file events.

    Forwards create/modify/move events for files matching the pattern.
    """

    def __init__(
        self,
        base_paths: Sequence[Path],
        pattern: str,
        emit: Callable[[FileEvent], None],
    ) -> None:
        super().__init__()
        self._base_paths = list(base_paths)
        self._pattern = pattern
        self._emit = emit

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(FileEventKind.ADDED, event, _decode(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(FileEventKind.CHANGED, event, _decode(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileSystemMovedEvent):
            self._forward(FileEventKind.ADDED, event, _decode(event.dest_path))

    def _forward(self, kind: FileEventKind, event: FileSystemEvent, src_path: str) -> None:
        if event.is_directory:
            return

        path = Path(src_path)
        relative = find_relative_path(self._base_paths, path)
        if relative is None or not matches_pattern(relative, self._pattern):
            return

        self._emit(FileEvent(kind, path))


class WatchdogEventSource:
    """Recursive watchdog watch over one or more base directories.

    The observer starts when iteration starts and stops when the iterator
    is closed. Base directories that do not exist are skipped.

    Attributes:
        base_paths: Directories to watch recursively.
        pattern: Glob pattern files must match, relative to their base.

    Example:
        >>> source = WatchdogEventSource([Path("src/include")], "**/*.inc")
        >>> async for event in source:
        ...     await copy_include(event.path)
    """

    def __init__(
        self,
        base_paths: Sequence[Path],
        pattern: str,
        *,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self.base_paths = [Path(p) for p in base_paths]
        self.pattern = pattern
        self._observer_factory = observer_factory
        self._started = False
        self._log = logger.bind(pattern=pattern, base_paths=[str(p) for p in self.base_paths])

    def __aiter__(self) -> AsyncIterator[FileEvent]:
        if self._started:
            raise WatcherError("File event source cannot be restarted")
        self._started = True
        return self._events()

    async def _events(self) -> AsyncIterator[FileEvent]:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[FileEvent] = asyncio.Queue()

        def emit(event: FileEvent) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, event)

        handler = _PatternEventHandler(self.base_paths, self.pattern, emit)
        observer = self._observer_factory()

        for base in self.base_paths:
            if not base.is_dir():
                self._log.warning("watch_dir_missing", path=str(base))
                continue
            observer.schedule(handler, str(base), recursive=True)

        try:
            observer.start()
        except OSError as e:
            raise WatcherError(
                "Failed to start file watcher",
                internal_details=str(e),
            ) from e

        self._log.info("watcher_started")
        try:
            while True:
                yield await queue.get()
        finally:
            observer.stop()
            await asyncio.to_thread(observer.join, 5.0)
            self._log.info("watcher_stopped")
