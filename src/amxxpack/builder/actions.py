"""Single-file build actions.

ProjectActions binds a ProjectConfig, a compiler and a log sink, and
exposes one coroutine per kind of input file. Both the batch build and
watch mode are compositions of these actions.

Destination rules:
- scripts and includes: base name directly under the output root
- assets: path relative to the containing assets input root
- plugins: plugins root, plus the script's sub-directory unless
  ``rules.flat_compilation`` is set
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from amxxpack.builder.sync import sync_file
from amxxpack.compiler import AmxxpcCompiler, CompileResult, PluginCompiler, log_message
from amxxpack.config import ProjectConfig
from amxxpack.errors import CompilationError, ConfigurationError
from amxxpack.output import BuildLogger
from amxxpack.paths import absolute_path, display_path, resolve_relative

logger = structlog.get_logger(__name__)


class ProjectActions:
    """File actions for one project.

    Attributes:
        config: Project configuration (read-only).
        log: Log sink for user-facing messages.
        compiler: Compiler used for plugins.

    Example:
        >>> actions = ProjectActions(load_config(), ConsoleLogger())
        >>> await actions.update_plugin(Path("src/scripts/test.sma"))
    """

    def __init__(
        self,
        config: ProjectConfig,
        log: BuildLogger,
        *,
        compiler: PluginCompiler | None = None,
    ) -> None:
        self.config = config
        self.log = log
        self.compiler: PluginCompiler = compiler or AmxxpcCompiler()

    async def update_plugin(self, path: Path) -> CompileResult:
        """Copy the raw script (if configured), then compile it."""
        await self.update_script(path)
        return await self.compile_plugin(path)

    async def update_script(self, path: Path) -> Path | None:
        """Copy a script into the scripts output directory.

        Returns:
            Destination path, or None when no scripts output is configured.
        """
        if self.config.output.scripts is None:
            return None

        dest_path = self.config.output.scripts / Path(path).name
        await sync_file(absolute_path(path), dest_path)
        self.log.info(f"Script updated: {display_path(dest_path)}")
        return dest_path

    async def update_include(self, path: Path) -> Path:
        """Copy an include file into the include output directory."""
        dest_path = self.config.output.include / Path(path).name
        await sync_file(absolute_path(path), dest_path)
        self.log.info(f"Include updated: {display_path(dest_path)}")
        return dest_path

    async def update_asset(self, path: Path) -> Path:
        """Copy an asset, keeping its path relative to its assets root.

        Raises:
            ConfigurationError: If no assets input is configured.
            PathResolutionError: If the asset is outside every assets root.
        """
        if self.config.input.assets is None:
            raise ConfigurationError("No assets input directory configured")

        relative_path = resolve_relative(self.config.input.assets, path, kind="asset")
        dest_path = self.config.output.assets / relative_path
        await sync_file(absolute_path(path), dest_path)
        self.log.info(f"Asset updated: {display_path(dest_path)}")
        return dest_path

    def plugin_dest_dir(self, path: Path) -> Path:
        """Directory the plugin for script ``path`` is written to.

        Raises:
            PathResolutionError: If mirroring is enabled and the script is
                outside every scripts root.
        """
        dest_dir = absolute_path(self.config.output.plugins)
        if self.config.rules.flat_compilation:
            return dest_dir

        relative_dir = resolve_relative(
            self.config.input.scripts,
            absolute_path(path).parent,
            kind="plugin",
        )
        return absolute_path(dest_dir / relative_dir)

    def include_dirs(self) -> list[Path]:
        """Compiler include directories, in lookup order.

        Compiler's bundled includes, then project includes, then the
        input include directories.
        """
        return [
            self.config.compiler.include_dir,
            *self.config.include,
            *self.config.input.include,
        ]

    async def compile_plugin(self, path: Path) -> CompileResult:
        """Compile a script and log its diagnostics.

        Returns:
            The successful CompileResult.

        Raises:
            CompilationError: If the compiler reports a failure.
            CompilerNotFoundError: If the compiler executable is missing.
            PathResolutionError: If the plugin directory cannot be computed.
        """
        src_path = absolute_path(path)
        dest_dir = self.plugin_dest_dir(src_path)

        await asyncio.to_thread(dest_dir.mkdir, parents=True, exist_ok=True)

        result = await self.compiler.compile(
            src_path,
            dest_dir,
            self.config.compiler.executable_path,
            self.include_dirs(),
        )

        for message in result.messages:
            log_message(self.log, message, src_path)

        logger.debug(
            "plugin_compiled",
            source=str(src_path),
            success=result.success,
            errors=result.error_count,
            warnings=result.warning_count,
        )

        if not result.success:
            raise CompilationError(display_path(src_path), result.error, result=result)

        self.log.success(f"Compilation success: {display_path(path)}")
        self.log.info(f"Plugin updated: {display_path(dest_dir / str(result.plugin))}")
        return result
