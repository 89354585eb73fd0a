"""Options and helpers shared by the commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from switchboard_cli.errors import handle_file_not_found

if TYPE_CHECKING:
    from switchboard_core import SwitchboardConfig, WarningCollector

config_option = click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.json [default: $SWITCHBOARD_CONFIG, then ./config.json]",
)


def load_config(
    config_path: str | None,
    warnings: WarningCollector,
) -> SwitchboardConfig:
    """Load the configuration for a command.

    An explicit path that does not exist exits with code 2. Without a
    path the loader's discovery applies, falling back to the built-in
    default document.
    """
    from switchboard_core import ConfigurationLoader

    path = Path(config_path) if config_path is not None else None
    if path is not None and not path.is_file():
        handle_file_not_found(str(path))
    return ConfigurationLoader(warnings=warnings).load(path=path, project_dir=Path.cwd())
