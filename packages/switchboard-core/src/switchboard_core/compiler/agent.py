"""Agent descriptor strategy for switchboard.

Applies build settings, the resolved core prompt, the runtime variable
table, callback URLs, transfer numbers and the generated booking schemas
to a conversational-agent descriptor.

Only fields already present in the source are updated; nothing is
created. Descriptor layout:

    {
      "agent_name", "voice_id", "max_call_duration_ms",
      "interruption_sensitivity", "version", "version_title",
      "conversationFlow": {
        "global_prompt", "default_dynamic_variables",
        "tools": [{"type", "name", "url", "parameters"}],
        "nodes": [{"type", "transfer_destination": {"number"}}]
      }
    }
"""

from __future__ import annotations

import re
from typing import Any

import structlog

from switchboard_core.compiler.documents import dump_document, load_document
from switchboard_core.compiler.models import ArtifactKind, SourceFile
from switchboard_core.compiler.registry import (
    CompileContext,
    InjectionRegistry,
    InjectionRule,
    always,
)
from switchboard_core.errors import InjectionTargetNotFound, ReferenceResolutionError

logger = structlog.get_logger(__name__)

FLOW_KEY = "conversationFlow"
BOOKING_TOOL = "bookAppointment"
MODIFY_TOOL = "modifyAppointment"
CUSTOM_TOOL_TYPE = "custom"
TRANSFER_NODE_TYPE = "transfer_call"
DEFAULT_TITLE_SUFFIX = "Demo"

_TITLE_VERSION_PREFIX = re.compile(r"^v[\d.]+\s*")


def semver_to_int(version: str) -> int:
    """Encode "major.minor.patch" as major*100 + minor*10 + patch.

    Example:
        >>> semver_to_int("1.2.3")
        123
    """
    parts: list[int] = []
    for piece in re.split(r"[.+-]", version)[:3]:
        parts.append(int(piece) if piece.isdigit() else 0)
    parts.extend([0] * (3 - len(parts)))
    major, minor, patch = parts
    return major * 100 + minor * 10 + patch


def _flow(document: dict[str, Any]) -> dict[str, Any] | None:
    flow = document.get(FLOW_KEY)
    return flow if isinstance(flow, dict) else None


def _items(flow: dict[str, Any] | None, key: str) -> list[dict[str, Any]]:
    if flow is None or not isinstance(flow.get(key), list):
        return []
    return [item for item in flow[key] if isinstance(item, dict)]


def inject_display_name(document: dict[str, Any], context: CompileContext) -> None:
    """Set the agent display name from Phase 1."""
    if "agent_name" in document:
        document["agent_name"] = context.phases.template["agent_name"]


def inject_version(document: dict[str, Any], context: CompileContext) -> None:
    """Write the integer version and the "v<semver> <suffix>" title."""
    version = context.phases.template["version"]
    if "version" in document:
        document["version"] = semver_to_int(version)
    if "version_title" in document:
        current = document["version_title"]
        existing_suffix = (
            _TITLE_VERSION_PREFIX.sub("", current) if isinstance(current, str) else ""
        )
        suffix = (
            context.phases.build.version_title_suffix or existing_suffix or DEFAULT_TITLE_SUFFIX
        )
        document["version_title"] = f"v{version} {suffix}"


def inject_voice_settings(document: dict[str, Any], context: CompileContext) -> None:
    """Apply voice and call tuning to the fields the descriptor carries."""
    build = context.phases.build
    if "voice_id" in document:
        document["voice_id"] = build.voice_id
    if "max_call_duration_ms" in document:
        document["max_call_duration_ms"] = build.max_call_duration_ms
    if "interruption_sensitivity" in document:
        document["interruption_sensitivity"] = build.interruption_sensitivity


def inject_global_prompt(document: dict[str, Any], context: CompileContext) -> None:
    """Copy the resolved core prompt into the global prompt field by value."""
    flow = _flow(document)
    if flow is None or "global_prompt" not in flow:
        raise InjectionTargetNotFound(f"{FLOW_KEY}.global_prompt", rule="global_prompt")
    if context.prompts.core is None:
        raise ReferenceResolutionError(
            "core_prompt",
            "Core prompt not found; global prompt left unchanged",
        )
    flow["global_prompt"] = context.prompts.core


def inject_dynamic_variables(document: dict[str, Any], context: CompileContext) -> None:
    """Replace the dynamic variable table with the Phase 3 mapping."""
    flow = _flow(document)
    if flow is None or "default_dynamic_variables" not in flow:
        raise InjectionTargetNotFound(
            f"{FLOW_KEY}.default_dynamic_variables", rule="dynamic_variables"
        )
    flow["default_dynamic_variables"] = dict(context.phases.runtime)


def inject_tool_callbacks(document: dict[str, Any], context: CompileContext) -> None:
    """Point every custom tool at its generated callback URL."""
    missing: list[str] = []
    for tool in _items(_flow(document), "tools"):
        name = tool.get("name")
        if tool.get("type") != CUSTOM_TOOL_TYPE or not name:
            continue
        identifier = context.identifiers.get(name)
        if identifier is None:
            missing.append(name)
            continue
        tool["url"] = identifier.url
        logger.debug("tool_url_updated", tool=name, hash=identifier.hash)

    if missing:
        raise ReferenceResolutionError(
            ", ".join(missing),
            f"No webhook configuration for tool(s): {', '.join(missing)}",
        )


def inject_transfer_numbers(document: dict[str, Any], context: CompileContext) -> None:
    """Rewrite the destination of transfer nodes that already carry one."""
    number = context.phases.build.transfer_phone_number
    if not number:
        return
    for node in _items(_flow(document), "nodes"):
        destination = node.get("transfer_destination")
        if (
            node.get("type") == TRANSFER_NODE_TYPE
            and isinstance(destination, dict)
            and destination.get("number")
        ):
            destination["number"] = number


def inject_service_schemas(document: dict[str, Any], context: CompileContext) -> None:
    """Overwrite the booking and modification tool parameter schemas."""
    engine = context.schema_engine
    if not engine.services:
        return

    tools = {tool.get("name"): tool for tool in _items(_flow(document), "tools")}
    generated = {
        BOOKING_TOOL: engine.appointment_schema,
        MODIFY_TOOL: engine.modify_tool_parameters,
    }
    missing: list[str] = []
    for tool_name, build_schema in generated.items():
        tool = tools.get(tool_name)
        if tool is None or "parameters" not in tool:
            missing.append(tool_name)
            continue
        tool["parameters"] = build_schema()
        logger.debug("tool_schema_generated", tool=tool_name, services=len(engine.services))

    if missing:
        raise InjectionTargetNotFound(", ".join(missing), rule="service_schemas")


AGENT_RULES: tuple[InjectionRule, ...] = (
    InjectionRule("display_name", always, inject_display_name),
    InjectionRule("version", always, inject_version),
    InjectionRule("voice_settings", always, inject_voice_settings),
    InjectionRule("global_prompt", always, inject_global_prompt),
    InjectionRule("dynamic_variables", always, inject_dynamic_variables),
    InjectionRule("tool_callbacks", always, inject_tool_callbacks),
    InjectionRule("transfer_numbers", always, inject_transfer_numbers),
    InjectionRule("service_schemas", always, inject_service_schemas),
)


def register_agent_rules(registry: InjectionRegistry) -> None:
    """Register the agent descriptor rules."""
    for rule in AGENT_RULES:
        registry.register(ArtifactKind.AGENT, rule)


def compile_agent(
    source: SourceFile,
    context: CompileContext,
    registry: InjectionRegistry,
) -> bytes:
    """Compile an agent descriptor.

    Raises:
        ArtifactParseError: If the source is not a JSON object.
    """
    document = load_document(source)
    applied = registry.apply(ArtifactKind.AGENT, document, source, context)
    logger.info("agent_compiled", source=source.relative_path, rules=applied)
    return dump_document(document)
