"""switchboard webhooks command - List resolved webhook endpoints."""

from __future__ import annotations

import click

from switchboard_cli.commands.common import config_option, load_config
from switchboard_cli.errors import handle_errors
from switchboard_cli.output import info, print_json, print_table


@click.command()
@config_option
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print endpoints as JSON for deployment tooling.",
)
def webhooks(config_path: str | None, as_json: bool) -> None:
    """List the webhook endpoint of every configured tool.

    Examples:

        switchboard webhooks

        switchboard webhooks --json > endpoints.json
    """
    from switchboard_core import (
        IdentifierGenerator,
        ServiceSchemaEngine,
        VariableResolver,
        WarningCollector,
    )

    with handle_errors("Endpoint listing"):
        config = load_config(config_path, WarningCollector())
        engine = ServiceSchemaEngine(
            config.client_data.services,
            config.client_data.service_constraints,
        )
        template = VariableResolver(config, engine).resolve_template()
        generator = IdentifierGenerator(
            template["business_name"],
            config.build_config.webhook_deployment,
            config.build_config.infrastructure.base_webhook_url,
        )

    identifiers = list(generator.identifiers.values())
    if as_json:
        print_json([identifier.to_dict() for identifier in identifiers])
        return

    if not identifiers:
        info("No webhook tools configured")
        return
    print_table(
        f"Webhooks for {template['business_name']}",
        ["Tool", "Endpoint", "Hash", "URL"],
        (
            (identifier.tool_name, identifier.endpoint_base, identifier.hash, identifier.url)
            for identifier in identifiers
        ),
    )
