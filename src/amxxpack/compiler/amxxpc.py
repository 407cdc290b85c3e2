"""amxxpc compiler wrapper.

Runs the AMX Mod X compiler as an asyncio subprocess and turns its
combined output into a CompileResult. The verdict comes from the
compiler's own report, not just its exit code: amxxpc can exit 0 after
printing errors, so a result is only successful when the process exits
cleanly, no error diagnostics were printed, and the plugin file exists.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import structlog

from amxxpack.compiler.diagnostics import parse_output
from amxxpack.compiler.models import CompileResult
from amxxpack.errors import CompilerNotFoundError

logger = structlog.get_logger(__name__)

PLUGIN_EXTENSION = ".amxx"


class PluginCompiler(Protocol):
    """Anything that can compile one script into a plugin."""

    async def compile(
        self,
        source: Path,
        dest_dir: Path,
        executable: Path,
        include_dirs: Sequence[Path],
    ) -> CompileResult: ...


def build_arguments(source: Path, output_file: Path, include_dirs: Sequence[Path]) -> list[str]:
    """Build the amxxpc argument list.

    Args:
        source: Script to compile.
        output_file: Plugin file to write.
        include_dirs: Include directories, in lookup order.

    Returns:
        Arguments (without the executable), e.g.
        ``["test.sma", "-oplugins/test.amxx", "-i.compiler/include"]``.
    """
    args = [str(source), f"-o{output_file}"]
    args.extend(f"-i{include_dir}" for include_dir in include_dirs)
    return args


class AmxxpcCompiler:
    """Compile scripts with amxxpc.

    Example:
        >>> compiler = AmxxpcCompiler()
        >>> result = await compiler.compile(
        ...     Path("src/scripts/test.sma"),
        ...     Path("dist/addons/amxmodx/plugins"),
        ...     Path(".compiler/amxxpc"),
        ...     [Path(".compiler/include")],
        ... )
        >>> result.plugin
        'test.amxx'
    """

    def __init__(self, plugin_extension: str = PLUGIN_EXTENSION) -> None:
        self.plugin_extension = plugin_extension

    async def compile(
        self,
        source: Path,
        dest_dir: Path,
        executable: Path,
        include_dirs: Sequence[Path],
    ) -> CompileResult:
        """Compile ``source`` into ``dest_dir``.

        Args:
            source: Script to compile.
            dest_dir: Existing directory for the plugin.
            executable: amxxpc executable.
            include_dirs: Include directories, in lookup order.

        Returns:
            CompileResult with the compiler's verdict and diagnostics.

        Raises:
            CompilerNotFoundError: If the executable cannot be started.
        """
        plugin = f"{source.stem}{self.plugin_extension}"
        output_file = dest_dir / plugin
        args = build_arguments(source, output_file, include_dirs)
        log = logger.bind(source=str(source), executable=str(executable))

        log.debug("compile_started", args=args)
        try:
            process = await asyncio.create_subprocess_exec(
                str(executable),
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise CompilerNotFoundError(source, executable, internal_details=str(e)) from e

        stdout, _ = await process.communicate()
        output = stdout.decode("utf-8", errors="replace")
        parsed = parse_output(output)
        exit_code = process.returncode

        log.debug(
            "compile_finished",
            exit_code=exit_code,
            messages=len(parsed.messages),
            has_errors=parsed.has_errors,
        )

        error: str | None = None
        if parsed.has_errors:
            error = parsed.failure_reason
        elif exit_code != 0:
            error = parsed.failure_reason or f"compiler exited with code {exit_code}"
        elif parsed.missing_output or not output_file.is_file():
            error = parsed.missing_output or f"Could not locate output file {output_file}"

        if error is not None:
            return CompileResult(
                success=False,
                error=error,
                messages=parsed.messages,
                output=output,
            )

        return CompileResult(
            success=True,
            plugin=plugin,
            messages=parsed.messages,
            output=output,
        )
