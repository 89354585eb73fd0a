"""CLI entry point for switchboard.

This module defines the main CLI group using the LazyGroup pattern so
`switchboard --help` does not import the compiler.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from switchboard_cli import __version__
from switchboard_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Commands are only imported when invoked, not at import time.

    Attributes:
        lazy_subcommands: Mapping of command names to "module.attribute" paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return sorted command names, lazy and directly registered."""
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, importing it on first use."""
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


def _configure_logging(log_level: str) -> None:
    from switchboard_core.observability import configure_logging

    configure_logging(log_level=log_level)


LAZY_COMMANDS = {
    "build": "switchboard_cli.commands.build.build",
    "clean": "switchboard_cli.commands.clean.clean",
    "validate": "switchboard_cli.commands.validate.validate",
    "webhooks": "switchboard_cli.commands.webhooks.webhooks",
    "schema": "switchboard_cli.commands.schema.schema",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="switchboard")
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
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="ERROR",
    help="Log level for diagnostics on stderr [default: ERROR]",
    expose_value=False,
    callback=lambda ctx, param, value: _configure_logging(value),
)
def cli() -> None:
    """Switchboard - Configuration compiler for AI voice receptionists.

    Compile one config.json and a tree of templates into a deployable
    voice agent, its workflows and its knowledge content.

    **Getting Started:**

    - `switchboard validate` - Validate your configuration
    - `switchboard build` - Compile src/ into dist/
    - `switchboard webhooks` - List webhook endpoints for deployment
    - `switchboard schema export` - Export JSON Schema for IDE support
    """
    pass


if __name__ == "__main__":
    cli()
