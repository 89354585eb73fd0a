"""Workflow descriptor strategy for switchboard.

A workflow descriptor is a JSON object with a `nodes` array (each node
`{name, type, parameters}`) and a `connections` map keyed by node name.
The workflow name is the source file stem (e.g. "bookAppointment").

Compilation:
1. Phase 1 placeholders are resolved in every string leaf.
2. Missing `name` / `active` fields are filled in.
3. Registered rules run: secondary prompt injection, service structure
   injection into inline scripts, and webhook trigger rewriting.
"""

from __future__ import annotations

import json
import re
from collections import Counter
from typing import Any

import structlog

from switchboard_core.compiler.documents import dump_document, load_document
from switchboard_core.compiler.models import ArtifactKind, SourceFile
from switchboard_core.compiler.registry import (
    CompileContext,
    InjectionRegistry,
    InjectionRule,
    Injector,
    Selector,
)
from switchboard_core.compiler.substitution import substitute, substitute_leaves
from switchboard_core.errors import InjectionTargetNotFound, ReferenceResolutionError

logger = structlog.get_logger(__name__)

QUESTION_WORKFLOW = "answerQuestion"
ANSWER_NODE_NAME = "Answer Agent"
ANSWER_NODE_TYPE = "@n8n/n8n-nodes-langchain.agent"

SERVICE_DEPENDENT_WORKFLOWS = frozenset(
    {"bookAppointment", "modifyAppointment", "cancelAppointment", "identifyAppointment"}
)

# Workflows triggered by an external callback, keyed to their tool name
WORKFLOW_TOOLS: dict[str, str] = {
    "bookAppointment": "bookAppointment",
    "answerQuestion": "answerQuestion",
    "logLead": "logLead",
    "identifyAppointment": "identifyAppointment",
    "modifyAppointment": "modifyAppointment",
    "cancelAppointment": "cancelAppointment",
    "dayAndTime": "dayAndTime",
}

WEBHOOK_NODE_TYPES = frozenset({"webhook", "n8n-nodes-base.webhook"})
SCRIPT_FIELD = "jsCode"
RENAME_HASH_PREFIX = 4

_LEGACY_DECLARATIONS: tuple[tuple[str, str], ...] = (
    ("serviceMapping", "service_mapping"),
    ("requiredProperties", "required_properties"),
    ("columnMapping", "column_mapping"),
)


def format_workflow_name(workflow_name: str) -> str:
    """Split a camel-case workflow name into title-cased words.

    Example:
        >>> format_workflow_name("bookAppointment")
        'Book Appointment'
    """
    spaced = re.sub(r"([A-Z])", r" \1", workflow_name).strip()
    return spaced[:1].upper() + spaced[1:]


def _nodes(document: dict[str, Any]) -> list[dict[str, Any]]:
    nodes = document.get("nodes")
    if not isinstance(nodes, list):
        return []
    return [node for node in nodes if isinstance(node, dict)]


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def rewrite_script(code: str, context: CompileContext) -> str:
    """Embed service structures into an inline script.

    Handles both `{{SERVICE_MAPPING}}`-style placeholders and the legacy
    literal `const serviceMapping = {...};` declarations.
    """
    config = context.schema_engine.workflow_config()
    placeholders = {
        "SERVICE_MAPPING": _to_json(config.service_mapping),
        "REQUIRED_PROPERTIES": _to_json(config.required_properties),
        "COLUMN_MAPPING": _to_json(config.column_mapping),
        "REVERSE_COLUMN_MAPPING": _to_json(config.reverse_column_mapping),
    }
    code = substitute(code, placeholders)

    for variable, attribute in _LEGACY_DECLARATIONS:
        pattern = re.compile(rf"const {variable} = \{{[^}}]+\}};", re.DOTALL)
        replacement = f"const {variable} = {_to_json(getattr(config, attribute))};"
        code = pattern.sub(lambda _m, r=replacement: r, code, count=1)
    return code


def inject_rag_prompt(document: dict[str, Any], context: CompileContext) -> None:
    """Overwrite the answer node's system message with the secondary prompt."""
    matched = [
        node
        for node in _nodes(document)
        if node.get("name") == ANSWER_NODE_NAME
        and node.get("type") == ANSWER_NODE_TYPE
        and isinstance(node.get("parameters"), dict)
        and isinstance(node["parameters"].get("options"), dict)
        and "systemMessage" in node["parameters"]["options"]
    ]
    if not matched:
        raise InjectionTargetNotFound(ANSWER_NODE_NAME, rule="rag_prompt")
    if context.prompts.rag is None:
        raise ReferenceResolutionError(
            "rag_prompt",
            "Answer question prompt not found; system message left unchanged",
        )

    prompt = substitute(context.prompts.rag, context.phases.template)
    for node in matched:
        node["parameters"]["options"]["systemMessage"] = prompt


def inject_service_config(document: dict[str, Any], context: CompileContext) -> None:
    """Rewrite service structures embedded in inline script fields."""
    if not context.schema_engine.services:
        logger.debug("service_injection_skipped", reason="no services")
        return

    scripted = [
        node
        for node in _nodes(document)
        if isinstance(node.get("parameters"), dict)
        and isinstance(node["parameters"].get(SCRIPT_FIELD), str)
    ]
    if not scripted:
        raise InjectionTargetNotFound(f"parameters.{SCRIPT_FIELD}", rule="service_config")
    for node in scripted:
        node["parameters"][SCRIPT_FIELD] = rewrite_script(node["parameters"][SCRIPT_FIELD], context)


def _migrate_connections(document: dict[str, Any], old_name: str, new_name: str) -> None:
    connections = document.get("connections")
    if not isinstance(connections, dict):
        return

    if old_name in connections:
        document["connections"] = {
            (new_name if key == old_name else key): value for key, value in connections.items()
        }

    def _retarget(value: Any) -> None:
        if isinstance(value, list):
            for item in value:
                _retarget(item)
        elif isinstance(value, dict):
            if value.get("node") == old_name:
                value["node"] = new_name
            for item in value.values():
                _retarget(item)

    _retarget(document["connections"])


def _make_webhook_injector(workflow_name: str) -> Injector:
    tool_name = WORKFLOW_TOOLS[workflow_name]

    def inject_webhook_trigger(document: dict[str, Any], context: CompileContext) -> None:
        identifier = context.identifiers.get(tool_name)
        if identifier is None:
            raise ReferenceResolutionError(
                tool_name,
                f"No webhook configuration found for workflow: {workflow_name}",
            )

        triggers = [node for node in _nodes(document) if node.get("type") in WEBHOOK_NODE_TYPES]
        if not triggers:
            raise InjectionTargetNotFound("webhook trigger", rule="webhook_trigger")

        name_counts = Counter(node.get("name") for node in _nodes(document))
        warned: set[str] = set()
        hash_prefix = identifier.hash[:RENAME_HASH_PREFIX]
        for node in triggers:
            if isinstance(node.get("parameters"), dict):
                node["parameters"]["path"] = identifier.path

            name = node.get("name")
            if not isinstance(name, str) or not name or hash_prefix in name:
                continue
            if name_counts[name] > 1:
                if name not in warned:
                    context.warnings.warn(
                        "duplicate_webhook_node",
                        f"Multiple nodes named '{name}'; webhook path updated, rename skipped",
                        source=workflow_name,
                    )
                    warned.add(name)
                continue

            new_name = f"{name} ({hash_prefix})"
            node["name"] = new_name
            _migrate_connections(document, name, new_name)
            logger.debug("webhook_node_renamed", old=name, new=new_name)

    return inject_webhook_trigger


def _is_workflow(name: str) -> Selector:
    return lambda source: source.stem == name


def register_workflow_rules(registry: InjectionRegistry) -> None:
    """Register the workflow descriptor rules."""
    registry.register(
        ArtifactKind.WORKFLOW,
        InjectionRule("rag_prompt", _is_workflow(QUESTION_WORKFLOW), inject_rag_prompt),
    )
    registry.register(
        ArtifactKind.WORKFLOW,
        InjectionRule(
            "service_config",
            lambda source: source.stem in SERVICE_DEPENDENT_WORKFLOWS,
            inject_service_config,
        ),
    )
    for workflow_name in WORKFLOW_TOOLS:
        registry.register(
            ArtifactKind.WORKFLOW,
            InjectionRule(
                f"webhook_trigger:{workflow_name}",
                _is_workflow(workflow_name),
                _make_webhook_injector(workflow_name),
            ),
        )


def compile_workflow(
    source: SourceFile,
    context: CompileContext,
    registry: InjectionRegistry,
) -> bytes:
    """Compile a workflow descriptor.

    Raises:
        ArtifactParseError: If the source is not a JSON object.
    """
    document = load_document(source)
    document = substitute_leaves(document, context.phases.template)

    if not document.get("name"):
        document["name"] = f"{context.phases.business_name} - {format_workflow_name(source.stem)}"
    if "active" not in document:
        document["active"] = True

    applied = registry.apply(ArtifactKind.WORKFLOW, document, source, context)
    logger.info("workflow_compiled", source=source.relative_path, rules=applied)
    return dump_document(document)
