"""Rich console output for amxxpack.

This module defines the BuildLogger protocol, the log sink every
orchestrator and action receives at construction, and ConsoleLogger,
its Rich-backed implementation. NO_COLOR is respected.
"""

from __future__ import annotations

import os
from typing import Protocol

from rich.console import Console
from rich.markup import escape

# Rich automatically respects NO_COLOR, but we also support --no-color flag
_force_no_color = os.environ.get("NO_COLOR") is not None


class BuildLogger(Protocol):
    """Leveled log sink used by the build pipeline.

    Only the side effect of presenting the message is relied upon;
    return values are ignored.
    """

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Args:
        no_color: If True, disable colored output.

    Note:
        Affects ConsoleLogger instances created afterwards without an
        explicit console.
    """
    global console
    console = create_console(no_color=no_color)


def get_console() -> Console:
    """Return the current global console."""
    return console


class ConsoleLogger:
    """BuildLogger that prints to a Rich console.

    Compiler output may contain square brackets, so messages are escaped
    before the level prefix markup is applied.

    Example:
        >>> log = ConsoleLogger()
        >>> log.success("Build finished!")
        ✓ Build finished!
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else get_console()

    def _print(self, markup: str) -> None:
        # Diagnostics stay on one line and are not syntax highlighted
        self.console.print(markup, soft_wrap=True, highlight=False)

    def info(self, message: str) -> None:
        self._print(escape(message))

    def success(self, message: str) -> None:
        self._print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        self._print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self._print(f"[red]✗[/red] {escape(message)}")

    def debug(self, message: str) -> None:
        self._print(f"[dim]{escape(message)}[/dim]")
