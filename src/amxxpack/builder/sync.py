"""Directory scanning, file copying and watch dispatch.

DirectorySynchronizer applies a per-file action to every file matching a
glob pattern under a set of base directories, either once (``build``) or
whenever a matching file is added or changed (``watch``).

Batch runs are strictly sequential: file i+1 starts only after the action
for file i has completed, so at most one compiler runs at a time and
diagnostics come out in scan order. Watch actions for different files run
concurrently; actions for the same file are coalesced by the debounce
window and serialized by a per-file lock.
"""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Awaitable, Callable, Iterable, Sequence
from pathlib import Path

import structlog

from amxxpack.builder.constants import get_watch_interval
from amxxpack.builder.watcher import EventSourceFactory, WatchdogEventSource
from amxxpack.output import BuildLogger
from amxxpack.paths import absolute_path

logger = structlog.get_logger(__name__)

FileAction = Callable[[Path], Awaitable[object]]


async def sync_file(source: Path, destination: Path) -> Path:
    """Copy ``source`` to ``destination``, creating parent directories.

    Existing destinations are overwritten.

    Args:
        source: File to copy.
        destination: Target file path.

    Returns:
        The destination path.

    Raises:
        OSError: If the directory cannot be created or the copy fails.
    """
    await asyncio.to_thread(destination.parent.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(shutil.copyfile, source, destination)
    return destination


def scan_directories(base_paths: Iterable[Path], pattern: str) -> list[Path]:
    """Find files matching ``pattern`` under each base directory.

    Base directories are visited in the given order and matches inside each
    one are sorted, so the result order is deterministic. Directories,
    missing bases and duplicates are skipped.
    """
    seen: set[Path] = set()
    matches: list[Path] = []

    for base in base_paths:
        base = Path(base)
        if not base.is_dir():
            continue

        for path in sorted(base.glob(pattern)):
            if not path.is_file():
                continue
            key = absolute_path(path)
            if key in seen:
                continue
            seen.add(key)
            matches.append(path)

    return matches


class _DebouncedDispatcher:
    """Schedules watch actions per file after a quiet period.

    A new event for a file still waiting out its window restarts the
    window. Once the window has passed the action runs under that file's
    lock; later events start a fresh window.
    """

    def __init__(self, action: FileAction, log: BuildLogger, delay: float) -> None:
        self._action = action
        self._log = log
        self._delay = delay
        self._waiting: dict[Path, asyncio.Task[None]] = {}
        self._locks: dict[Path, asyncio.Lock] = {}
        self._lock_users: dict[Path, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def schedule(self, path: Path) -> None:
        key = absolute_path(path)

        waiting = self._waiting.pop(key, None)
        if waiting is not None:
            waiting.cancel()

        task = asyncio.create_task(self._run(key, path))
        self._waiting[key] = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, key: Path, path: Path) -> None:
        await asyncio.sleep(self._delay)

        if self._waiting.get(key) is asyncio.current_task():
            del self._waiting[key]

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                try:
                    await self._action(path)
                except Exception as e:
                    logger.warning("watch_action_failed", path=str(path), error=str(e))
                    self._log.error(str(e))
        finally:
            # Dropped once no task holds or waits for it
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel(self) -> None:
        for task in list(self._tasks):
            task.cancel()


class DirectorySynchronizer:
    """Apply file actions to pattern matches, once or on every change.

    Attributes:
        debounce_seconds: Quiet period before a watch action runs.

    Example:
        >>> sync = DirectorySynchronizer(ConsoleLogger())
        >>> await sync.for_each_match([Path("src/include")], "**/*.inc", copy_include)
    """

    def __init__(
        self,
        log: BuildLogger,
        *,
        event_source_factory: EventSourceFactory = WatchdogEventSource,
        debounce_seconds: float | None = None,
    ) -> None:
        self.log = log
        self.debounce_seconds = (
            get_watch_interval() if debounce_seconds is None else debounce_seconds
        )
        self._event_source_factory = event_source_factory

    async def scan(self, base_paths: Sequence[Path], pattern: str) -> list[Path]:
        """Return matching files in deterministic order (see scan_directories)."""
        return await asyncio.to_thread(scan_directories, list(base_paths), pattern)

    async def for_each(self, paths: Sequence[Path], action: FileAction) -> None:
        """Run ``action`` on each path in order, awaiting each before the next.

        Exceptions from ``action`` propagate and stop the loop.
        """
        for path in paths:
            await action(path)

    async def for_each_match(
        self,
        base_paths: Sequence[Path],
        pattern: str,
        action: FileAction,
    ) -> list[Path]:
        """Scan once, then run ``action`` sequentially on every match.

        Returns:
            The matched paths, in the order they were processed.
        """
        matches = await self.scan(base_paths, pattern)
        logger.debug("matches_found", pattern=pattern, count=len(matches))
        await self.for_each(matches, action)
        return matches

    async def watch(
        self,
        base_paths: Sequence[Path],
        pattern: str,
        action: FileAction,
    ) -> None:
        """Run ``action`` whenever a matching file is added or changed.

        Failures of ``action`` are logged and never end the watch. Returns
        when the event source is exhausted and triggered actions finished;
        the default watchdog source never ends.
        """
        dispatcher = _DebouncedDispatcher(action, self.log, self.debounce_seconds)
        source = self._event_source_factory(list(base_paths), pattern)
        log = logger.bind(pattern=pattern)

        try:
            async for event in source:
                log.debug("watch_event", kind=event.kind.value, path=str(event.path))
                dispatcher.schedule(event.path)
        except asyncio.CancelledError:
            dispatcher.cancel()
            raise

        await dispatcher.drain()
