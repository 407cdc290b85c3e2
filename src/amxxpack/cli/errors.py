"""CLI error handling for amxxpack.

Wraps amxxpack exceptions into user-friendly messages with
appropriate exit codes.
"""

from __future__ import annotations

from typing import NoReturn

import click

from amxxpack.errors import AmxxpackError, CompilerNotFoundError
from amxxpack.output import ConsoleLogger

# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Build failed, invalid configuration
EXIT_SYSTEM_ERROR = 2  # Missing compiler, permissions, write failure


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        ConsoleLogger().error(self.format_message())


def handle_amxxpack_error(err: AmxxpackError) -> NoReturn:
    """Convert an amxxpack exception into a CLIError.

    Raises:
        CLIError: Always, with an exit code matching the error kind.
    """
    if isinstance(err, CompilerNotFoundError):
        raise CLIError(
            f"{err.user_message}\n\n"
            "Check 'compiler.dir' and 'compiler.executable' in .amxxpack.json.",
            exit_code=EXIT_SYSTEM_ERROR,
        )

    raise CLIError(err.user_message)


def handle_os_error(err: OSError) -> NoReturn:
    """Handle filesystem errors raised while copying or creating directories.

    Raises:
        CLIError: Always raises with a system error exit code.
    """
    if isinstance(err, PermissionError):
        message = f"Permission denied: {err.filename}"
    else:
        message = f"File operation failed: {err}"

    raise CLIError(message, exit_code=EXIT_SYSTEM_ERROR)
