"""Build and watch orchestration.

BuildOrchestrator runs a one-shot build: assets, includes, then the
script batch. Each script goes ``pending -> compiling -> succeeded |
failed``; the batch folds into SUCCEEDED, FAILED (all files attempted,
some failed, ``ignore_errors``) or ABORTED (stopped at the first failure).

WatchOrchestrator keeps the output tree in sync with the input tree:
one watch per input kind, each bound to the matching file action.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from amxxpack.builder.actions import ProjectActions
from amxxpack.builder.constants import (
    ASSETS_PATH_PATTERN,
    INCLUDE_PATH_PATTERN,
    SCRIPT_EXTENSION,
    SCRIPTS_PATH_PATTERN,
)
from amxxpack.builder.sync import DirectorySynchronizer
from amxxpack.compiler import PluginCompiler
from amxxpack.config import BuildOptions, ProjectConfig
from amxxpack.errors import AmxxpackError, CompilerNotFoundError
from amxxpack.output import BuildLogger
from amxxpack.paths import find_relative_path, matches_pattern

logger = structlog.get_logger(__name__)


class FileStatus(str, Enum):
    """Outcome of one script in a batch."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BatchStatus(str, Enum):
    """Outcome of a script batch.

    Attributes:
        SUCCEEDED: Every script compiled
        FAILED: Every script was attempted, at least one failed
        ABORTED: Stopped at the first failure
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


class FileOutcome(BaseModel):
    """Result of one script in a batch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    status: FileStatus
    error: str | None = None


class BatchResult(BaseModel):
    """Aggregated result of a script batch.

    Attributes:
        status: Batch outcome.
        files: Per-script outcomes, in processing order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: BatchStatus
    files: tuple[FileOutcome, ...] = Field(default=())

    @property
    def success(self) -> bool:
        """True iff every attempted script compiled."""
        return self.status == BatchStatus.SUCCEEDED

    @property
    def failed_count(self) -> int:
        return sum(1 for f in self.files if f.status == FileStatus.FAILED)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for f in self.files if f.status == FileStatus.SUCCEEDED)


class BuildAbortedError(AmxxpackError):
    """Raised when a batch stops at its first failing script.

    The failing script's error is chained as ``__cause__``.

    Attributes:
        result: Batch result up to and including the failing script.
    """

    def __init__(self, result: BatchResult, cause: AmxxpackError) -> None:
        super().__init__(cause.user_message)
        self.result = result


class BuildOrchestrator:
    """Run a full project build.

    Attributes:
        config: Project configuration (read-only).
        log: Log sink for user-facing messages.
        actions: File actions bound to the project.
        synchronizer: Scans input directories.

    Example:
        >>> orchestrator = BuildOrchestrator(load_config(), ConsoleLogger())
        >>> success = await orchestrator.build(BuildOptions(ignore_errors=True))
    """

    def __init__(
        self,
        config: ProjectConfig,
        log: BuildLogger,
        *,
        compiler: PluginCompiler | None = None,
        actions: ProjectActions | None = None,
        synchronizer: DirectorySynchronizer | None = None,
    ) -> None:
        self.config = config
        self.log = log
        self.actions = actions or ProjectActions(config, log, compiler=compiler)
        self.synchronizer = synchronizer or DirectorySynchronizer(log)
        self._log = logger.bind(component="build_orchestrator")

    async def build(self, options: BuildOptions | None = None) -> bool:
        """Build assets, includes and plugins.

        Always ends with exactly one terminal log line.

        Returns:
            True iff every script compiled.

        Raises:
            BuildAbortedError: A script failed and ``ignore_errors`` is off.
            CompilerNotFoundError: The compiler executable is missing.
            PathResolutionError: An asset is outside every assets root.
            OSError: Copying or directory creation failed.
        """
        options = options or BuildOptions()
        self.log.info("Building...")

        try:
            await self.build_assets()
            await self.build_include()
            result = await self.build_src(options)
        except Exception:
            self.log.error("Build finished with errors!")
            raise

        if result.success:
            self.log.success("Build finished!")
        else:
            self.log.error("Build finished with errors!")

        return result.success

    async def build_assets(self) -> list[Path]:
        """Copy all assets. Does nothing when no assets input is configured."""
        if self.config.input.assets is None:
            return []

        return await self.synchronizer.for_each_match(
            self.config.input.assets,
            ASSETS_PATH_PATTERN,
            self.actions.update_asset,
        )

    async def build_include(self) -> list[Path]:
        """Copy all include files."""
        return await self.synchronizer.for_each_match(
            self.config.input.include,
            INCLUDE_PATH_PATTERN,
            self.actions.update_include,
        )

    async def build_src(self, options: BuildOptions | None = None) -> BatchResult:
        """Copy and compile every script, in scan order."""
        scripts = await self.synchronizer.scan(self.config.input.scripts, SCRIPTS_PATH_PATTERN)
        return await self._run_batch(scripts, options or BuildOptions())

    async def compile(
        self,
        patterns: Sequence[str],
        options: BuildOptions | None = None,
    ) -> BatchResult:
        """Copy and compile only the scripts whose path matches a pattern.

        Args:
            patterns: Glob patterns matched against script paths relative to
                their scripts root (e.g. ``"test*"``, ``"maps/de_dust.sma"``).
            options: Build options.
        """
        scripts = await self.find_plugins(patterns)
        if not scripts:
            self.log.warning(f"No scripts match: {', '.join(patterns)}")
        return await self._run_batch(scripts, options or BuildOptions())

    async def find_plugins(self, patterns: Sequence[str]) -> list[Path]:
        """Scripts under the scripts input matching any pattern at any depth.

        Each pattern is matched as ``**/<pattern>`` against the script path
        relative to its scripts root, so ``"admin*"`` and ``"maps/de_dust.sma"``
        both select files in sub-directories.
        """
        roots = self.config.input.scripts
        scripts = await self.synchronizer.scan(roots, SCRIPTS_PATH_PATTERN)
        globs = [f"**/{pattern}" for pattern in patterns]

        found: list[Path] = []
        for path in scripts:
            relative = find_relative_path(roots, path)
            if path.suffix != SCRIPT_EXTENSION or relative is None:
                continue
            if any(matches_pattern(relative, glob) for glob in globs):
                found.append(path)

        return found

    async def _run_batch(self, scripts: Sequence[Path], options: BuildOptions) -> BatchResult:
        outcomes: list[FileOutcome] = []

        self._log.info(
            "batch_started",
            scripts=len(scripts),
            ignore_errors=options.ignore_errors,
        )

        async def step(path: Path) -> None:
            try:
                await self.actions.update_plugin(path)
            except CompilerNotFoundError:
                raise
            except AmxxpackError as e:
                outcomes.append(FileOutcome(path=path, status=FileStatus.FAILED, error=str(e)))
                self.log.error(str(e))

                if not options.ignore_errors:
                    result = BatchResult(status=BatchStatus.ABORTED, files=tuple(outcomes))
                    self._log.warning("batch_aborted", script=str(path))
                    raise BuildAbortedError(result, e) from e
                return

            outcomes.append(FileOutcome(path=path, status=FileStatus.SUCCEEDED))

        await self.synchronizer.for_each(scripts, step)

        failed = any(o.status == FileStatus.FAILED for o in outcomes)
        result = BatchResult(
            status=BatchStatus.FAILED if failed else BatchStatus.SUCCEEDED,
            files=tuple(outcomes),
        )

        self._log.info(
            "batch_completed",
            status=result.status.value,
            succeeded=result.succeeded_count,
            failed=result.failed_count,
        )
        return result


class WatchOrchestrator:
    """Rebuild individual files as they change.

    Runs until every event source ends; the default watchdog sources never
    do. Failures are logged per file and never stop the watch.

    Example:
        >>> await WatchOrchestrator(load_config(), ConsoleLogger()).watch()
    """

    def __init__(
        self,
        config: ProjectConfig,
        log: BuildLogger,
        *,
        compiler: PluginCompiler | None = None,
        actions: ProjectActions | None = None,
        synchronizer: DirectorySynchronizer | None = None,
    ) -> None:
        self.config = config
        self.log = log
        self.actions = actions or ProjectActions(config, log, compiler=compiler)
        self.synchronizer = synchronizer or DirectorySynchronizer(log)

    async def watch(self) -> None:
        """Watch assets (if configured), includes and scripts."""
        watches = []

        if self.config.input.assets is not None:
            watches.append(
                self.synchronizer.watch(
                    self.config.input.assets,
                    ASSETS_PATH_PATTERN,
                    self.actions.update_asset,
                )
            )

        watches.append(
            self.synchronizer.watch(
                self.config.input.include,
                INCLUDE_PATH_PATTERN,
                self.actions.update_include,
            )
        )
        watches.append(
            self.synchronizer.watch(
                self.config.input.scripts,
                SCRIPTS_PATH_PATTERN,
                self.actions.update_plugin,
            )
        )

        self.log.info("Watching for changes...")
        await asyncio.gather(*watches)
