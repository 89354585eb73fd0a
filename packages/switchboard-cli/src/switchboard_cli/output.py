"""Rich console output utilities for switchboard-cli.

This module provides formatted console output with Rich, supporting
colored success/error/warning messages and respecting the NO_COLOR
environment variable.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Rich respects NO_COLOR on its own; --no-color is handled by set_no_color
_force_no_color = os.environ.get("NO_COLOR") is not None


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


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Build complete")
        ✓ Build complete
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Service count (9) exceeds maximum allowed (8)")
        ✗ Service count (9) exceeds maximum allowed (8)
    """
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(escape(message), **kwargs)


def print_json(data: Any, **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Example:
        >>> print_json([{"tool": "bookAppointment", "hash": "d08a69e1"}])
    """
    console.print_json(json.dumps(data, ensure_ascii=False), **kwargs)


def print_table(title: str, columns: list[str], rows: Iterable[Iterable[str]]) -> None:
    """Print rows as a table.

    Args:
        title: Table title.
        columns: Column headers.
        rows: Cell values, one iterable per row.
    """
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))
    console.print(table)


def print_warnings(warnings: Iterable[Any]) -> int:
    """Print build warnings, one per line.

    Args:
        warnings: Objects with `message` and `source` attributes.

    Returns:
        Number of warnings printed.
    """
    count = 0
    for item in warnings:
        location = f" ({item.source})" if item.source else ""
        warning(f"{item.message}{location}")
        count += 1
    return count


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Note:
        This updates the module-level console instance.
    """
    global console
    console = create_console(no_color=no_color)
