"""switchboard clean command - Remove build output."""

from __future__ import annotations

from pathlib import Path

import click

from switchboard_cli.errors import handle_errors
from switchboard_cli.output import info, success


@click.command()
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(file_okay=False),
    default="dist",
    help="Output directory [default: dist]",
)
def clean(output_path: str) -> None:
    """Remove the output directory.

    Examples:

        switchboard clean

        switchboard clean --output build
    """
    from switchboard_core.compiler import clean_output

    with handle_errors("Clean"):
        removed = clean_output(Path(output_path))

    if removed:
        success(f"Removed {output_path}")
    else:
        info(f"Nothing to clean: {output_path} does not exist")
