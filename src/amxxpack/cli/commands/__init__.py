"""CLI command modules.

This package contains the implementation of all CLI subcommands and the
option/config helpers they share.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from amxxpack.config import ProjectConfig

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to project config [default: ./.amxxpack.json]",
)

ignore_errors_option = click.option(
    "--ignore-errors",
    is_flag=True,
    default=False,
    help="Keep compiling after a script fails (the run still fails).",
)


def load_project_config(config_path: str | None) -> ProjectConfig:
    """Load the project config for a command, exiting on errors.

    Raises:
        CLIError: If the config file is missing or invalid.
    """
    from amxxpack.cli.errors import handle_amxxpack_error
    from amxxpack.config import load_config
    from amxxpack.errors import ConfigurationError

    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigurationError as e:
        handle_amxxpack_error(e)


__all__: list[str] = ["config_option", "ignore_errors_option", "load_project_config"]
