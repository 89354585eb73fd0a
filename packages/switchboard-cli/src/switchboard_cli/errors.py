"""CLI error handling for switchboard-cli.

This module wraps switchboard-core exceptions into user-friendly
messages with appropriate exit codes.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

import click

from switchboard_cli.output import error

# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Invalid configuration, constraint violation
EXIT_SYSTEM_ERROR = 2  # Missing file, permissions, write failure


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
        """Display the error message using Rich formatting."""
        error(self.format_message())


@contextmanager
def handle_errors(action: str) -> Iterator[None]:
    """Translate core and filesystem errors into CLI errors.

    Args:
        action: What was being attempted, for the message prefix
            (e.g. "Build").

    Raises:
        CLIError: Exit code 1 for configuration problems, 2 for
            filesystem problems.

    Example:
        >>> with handle_errors("Build"):
        ...     compiler.build()
    """
    from switchboard_core.errors import SwitchboardError

    try:
        yield
    except SwitchboardError as e:
        raise CLIError(f"{action} failed: {e.user_message}") from None
    except PermissionError as e:
        handle_permission_error(str(e.filename or ""), "write")
    except OSError as e:
        raise CLIError(f"{action} failed: {e}", exit_code=EXIT_SYSTEM_ERROR) from None


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle a missing input file.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Create a config.json or use --config to specify a path.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Handle permission errors.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )
