"""amxxpack watch command - Rebuild files as they change."""

from __future__ import annotations

import asyncio

import click

from amxxpack.cli.commands import config_option, load_project_config
from amxxpack.cli.errors import EXIT_SUCCESS, handle_amxxpack_error


@click.command()
@config_option
def watch(config_path: str | None) -> None:
    """Watch input directories and rebuild changed files.

    Changed include files and assets are copied, changed scripts are
    copied and compiled. Errors are reported and watching continues.
    Stop with Ctrl+C.

    Examples:

        amxxpack watch

        AMXXPACK_WATCH_INTERVAL=1 amxxpack watch
    """
    from amxxpack.builder import WatchOrchestrator
    from amxxpack.errors import WatcherError
    from amxxpack.output import ConsoleLogger

    config = load_project_config(config_path)
    log = ConsoleLogger()

    try:
        asyncio.run(WatchOrchestrator(config, log).watch())
    except KeyboardInterrupt:
        log.info("Watch stopped")
        raise SystemExit(EXIT_SUCCESS) from None
    except WatcherError as e:
        handle_amxxpack_error(e)
