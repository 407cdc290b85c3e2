"""CLI entry point for amxxpack.

This module defines the main CLI group using the LazyGroup pattern so
``amxxpack --help`` does not import the build pipeline.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from amxxpack.cli import __version__
from amxxpack.observability import configure_logging
from amxxpack.output import set_no_color

# Configure rich-click for better help formatting
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Commands are only imported when actually invoked, not at import time.

    Attributes:
        lazy_subcommands: Mapping of command names to module paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"build": "amxxpack.cli.commands.build.build"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "build": "amxxpack.cli.commands.build.build",
    "compile": "amxxpack.cli.commands.compile.compile_cmd",
    "watch": "amxxpack.cli.commands.watch.watch",
}


def _set_verbose(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    configure_logging(log_level="DEBUG" if value else "WARNING")


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="amxxpack")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Show internal debug events on stderr.",
    expose_value=False,
    callback=_set_verbose,
)
def cli() -> None:
    """amxxpack - AMX Mod X project builder.

    Copy includes and assets, compile plugins with amxxpc, and keep the
    output tree in sync while you edit.

    **Getting Started:**

    - `amxxpack build` - Build the whole project
    - `amxxpack compile test*` - Compile matching scripts only
    - `amxxpack watch` - Rebuild files as they change
    """
    pass


if __name__ == "__main__":
    cli()
