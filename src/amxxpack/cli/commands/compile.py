"""amxxpack compile command - Compile selected scripts."""

from __future__ import annotations

import asyncio

import click

from amxxpack.cli.commands import config_option, ignore_errors_option, load_project_config
from amxxpack.cli.errors import EXIT_USER_ERROR, handle_amxxpack_error, handle_os_error


@click.command("compile")
@click.argument("patterns", nargs=-1, required=True)
@config_option
@ignore_errors_option
def compile_cmd(patterns: tuple[str, ...], config_path: str | None, ignore_errors: bool) -> None:
    """Compile the scripts matching PATTERNS.

    Patterns match at any depth below the scripts directory. Only scripts
    are processed; includes and assets are left untouched.

    Examples:

        amxxpack compile test.sma

        amxxpack compile "admin*" "maps_*"

        amxxpack compile maps/de_dust.sma
    """
    from amxxpack.builder import BuildAbortedError, BuildOrchestrator
    from amxxpack.config import BuildOptions
    from amxxpack.errors import AmxxpackError
    from amxxpack.output import ConsoleLogger

    config = load_project_config(config_path)
    orchestrator = BuildOrchestrator(config, ConsoleLogger())

    try:
        result = asyncio.run(
            orchestrator.compile(list(patterns), BuildOptions(ignore_errors=ignore_errors))
        )
    except BuildAbortedError:
        raise SystemExit(EXIT_USER_ERROR) from None
    except AmxxpackError as e:
        handle_amxxpack_error(e)
    except OSError as e:
        handle_os_error(e)

    if not result.files or not result.success:
        raise SystemExit(EXIT_USER_ERROR)
