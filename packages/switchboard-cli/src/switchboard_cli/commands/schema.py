"""switchboard schema command - Export JSON Schema."""

from __future__ import annotations

import click

from switchboard_cli.errors import handle_errors
from switchboard_cli.output import success


@click.group()
def schema() -> None:
    """Manage JSON Schema for IDE support.

    **Commands:**

    - `switchboard schema export` - Export the config.json JSON Schema
    - `switchboard schema export-report` - Export the build-info.json JSON Schema
    """
    pass


@schema.command("export")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default="./schemas/config.schema.json",
    help="Output path [default: ./schemas/config.schema.json]",
)
def export_schema(output_path: str) -> None:
    """Export the configuration document JSON Schema.

    Examples:

        switchboard schema export

        switchboard schema export --output .vscode/config.schema.json
    """
    from switchboard_core import export_config_schema

    with handle_errors("Schema export"):
        export_config_schema(output_path)
    success(f"Schema exported to {output_path}")


@schema.command("export-report")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default="./schemas/build-info.schema.json",
    help="Output path [default: ./schemas/build-info.schema.json]",
)
def export_report_schema(output_path: str) -> None:
    """Export the build report JSON Schema.

    Examples:

        switchboard schema export-report
    """
    from switchboard_core import export_build_report_schema

    with handle_errors("Schema export"):
        export_build_report_schema(output_path)
    success(f"Report schema exported to {output_path}")
