"""switchboard validate command - Validate the configuration document."""

from __future__ import annotations

import click

from switchboard_cli.commands.common import config_option, load_config
from switchboard_cli.errors import handle_errors
from switchboard_cli.output import print_warnings, success


@click.command()
@config_option
def validate(config_path: str | None) -> None:
    """Validate the configuration document.

    Checks section and field types, unique service slugs, the service
    constraint bounds and the webhook settings without writing any
    output.

    Examples:

        switchboard validate

        switchboard validate --config path/to/config.json
    """
    from switchboard_core import (
        IdentifierGenerator,
        ServiceSchemaEngine,
        VariableResolver,
        WarningCollector,
    )

    warnings = WarningCollector()
    with handle_errors("Validation"):
        config = load_config(config_path, warnings)
        engine = ServiceSchemaEngine(
            config.client_data.services,
            config.client_data.service_constraints,
        )
        template = VariableResolver(config, engine).resolve_template()
        IdentifierGenerator(
            template["business_name"],
            config.build_config.webhook_deployment,
            config.build_config.infrastructure.base_webhook_url,
        )

    print_warnings(warnings)
    success(
        f"Configuration valid: {len(engine.services)} services, "
        f"{len(engine.csv_columns())} CSV columns"
    )
