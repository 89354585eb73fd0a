"""switchboard build command - Compile templates into artifacts."""

from __future__ import annotations

from pathlib import Path

import click

from switchboard_cli.commands.common import config_option, load_config
from switchboard_cli.errors import handle_errors
from switchboard_cli.output import info, print_warnings, success


@click.command()
@config_option
@click.option(
    "-s",
    "--source",
    "source_path",
    type=click.Path(file_okay=False),
    default="src",
    help="Source template directory [default: src]",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(file_okay=False),
    default="dist",
    help="Output directory [default: dist]",
)
@click.option(
    "--clean",
    is_flag=True,
    default=False,
    help="Remove the output directory before writing.",
)
def build(config_path: str | None, source_path: str, output_path: str, clean: bool) -> None:
    """Compile the source templates into deployable artifacts.

    Prompt files are compiled first and embedded into the agent
    descriptor and the question-answering workflow. A build report is
    written to build-info.json in the output directory.

    Examples:

        switchboard build

        switchboard build --config client.json --output dist --clean
    """
    from switchboard_core import Compiler, WarningCollector

    warnings = WarningCollector()
    with handle_errors("Build"):
        config = load_config(config_path, warnings)
        compiler = Compiler(config, Path(source_path), Path(output_path), warnings=warnings)
        report = compiler.build(clean=clean)

    print_warnings(report.warnings)
    if report.token_usage is not None and report.token_usage.total:
        info(f"Estimated tokens: {report.token_usage.total}")
    success(
        f"Built {report.total_files} files to {output_path} "
        f"({len(report.warnings)} warnings, {report.elapsed_ms} ms)"
    )
