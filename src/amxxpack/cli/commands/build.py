"""amxxpack build command - Build the whole project."""

from __future__ import annotations

import asyncio

import click

from amxxpack.cli.commands import config_option, ignore_errors_option, load_project_config
from amxxpack.cli.errors import EXIT_USER_ERROR, handle_amxxpack_error, handle_os_error


@click.command()
@config_option
@ignore_errors_option
def build(config_path: str | None, ignore_errors: bool) -> None:
    """Build assets, includes and plugins.

    Copies assets and include files to the output directories, then
    copies and compiles every script. Stops at the first failing script
    unless --ignore-errors is given.

    Examples:

        amxxpack build

        amxxpack build --ignore-errors

        amxxpack build --config path/to/.amxxpack.json
    """
    # Import here to avoid heavy imports at CLI startup
    from amxxpack.builder import BuildAbortedError, BuildOrchestrator
    from amxxpack.config import BuildOptions
    from amxxpack.errors import AmxxpackError
    from amxxpack.output import ConsoleLogger

    config = load_project_config(config_path)
    orchestrator = BuildOrchestrator(config, ConsoleLogger())

    try:
        success = asyncio.run(orchestrator.build(BuildOptions(ignore_errors=ignore_errors)))
    except BuildAbortedError:
        # Failure and terminal line were already printed
        raise SystemExit(EXIT_USER_ERROR) from None
    except AmxxpackError as e:
        handle_amxxpack_error(e)
    except OSError as e:
        handle_os_error(e)

    if not success:
        raise SystemExit(EXIT_USER_ERROR)
