"""Shared pytest fixtures for switchboard-core tests.

This module provides the configuration documents and source trees used
across unit and integration tests.
"""

from __future__ import annotations

import copy
import json
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
import structlog

from switchboard_core.compiler.config_loader import ConfigurationLoader
from switchboard_core.compiler.models import SourceFile, WarningCollector
from switchboard_core.compiler.registry import CompileContext
from switchboard_core.compiler.service_schema import ServiceSchemaEngine
from switchboard_core.compiler.variables import VariableResolver
from switchboard_core.compiler.webhooks import IdentifierGenerator
from switchboard_core.schemas import SwitchboardConfig

FIXED_NOW = datetime(2024, 3, 15, 14, 30, tzinfo=UTC)

CORE_PROMPT_PATH = "prompts/{{business_name}} Core Prompt.md"
RAG_PROMPT_PATH = "prompts/{{business_name}} Answer Question - RAG Agent Prompt.md"
AGENT_PATH = "{{business_name}} - Retell Agent.json"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Without this, structlog may use different processors depending on
    test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def make_service(slug: str, required: int = 3, optional: int = 0) -> dict[str, Any]:
    """Build a service document with numbered string properties."""
    return {
        "name": slug.replace("_", " ").title(),
        "slug": slug,
        "durationMinutes": 45,
        "properties": {
            "required": [
                {"name": f"{slug}_req_{i}", "prompt": f"Ask for {slug} detail {i}"}
                for i in range(1, required + 1)
            ],
            "optional": [
                {"name": f"{slug}_opt_{i}", "prompt": f"Optionally ask for {slug} extra {i}"}
                for i in range(1, optional + 1)
            ],
        },
    }


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A complete configuration document with two services.

    Each service has three required properties, so the appointment
    spreadsheet has 11 base + 6 dynamic columns.
    """
    return {
        "templating": {
            "auto_generate_from_repo": False,
            "repository_name": "acme-auto-voice-receptionist",
            "version": "1.2.3",
            "variables": {"business_name": "Acme Auto"},
        },
        "build_config": {
            "version_settings": {"version_title_suffix": "Production"},
            "voice_settings": {
                "voice_id": "11labs-Ethan",
                "max_call_duration_ms": 480000,
                "interruption_sensitivity": 0.7,
            },
            "infrastructure": {
                "transfer_phone_number": "+15555550100",
                "base_webhook_url": "https://n8n.example.com",
            },
            "webhook_deployment": {
                "enabled": True,
                "hash_algorithm": "sha256",
                "hash_length": 8,
                "tools": {
                    "bookAppointment": {"endpoint_base": "bookappointment"},
                    "answerQuestion": {"endpoint_base": "answerquestion"},
                    "modifyAppointment": {"endpoint_base": "modifyappointment"},
                },
            },
        },
        "client_data": {
            "business_info": {
                "name": "Acme Auto",
                "tagline": "Honest repairs",
                "email": "service@acme.example",
                "phone": "+15555550123",
                "website": "https://acme.example",
                "timezone": "America/Chicago",
                "description": "Family-owned auto repair.",
            },
            "services": [
                {
                    "name": "Oil Change",
                    "slug": "oil_change",
                    "durationMinutes": 30,
                    "properties": {
                        "required": [
                            {"name": "vehicle_make", "prompt": "What make is the vehicle?"},
                            {"name": "vehicle_model", "prompt": "What model is the vehicle?"},
                            {
                                "name": "oil_type",
                                "type": "enum",
                                "prompt": "Synthetic or conventional?",
                                "options": ["synthetic", "conventional"],
                            },
                        ]
                    },
                },
                {
                    "name": "Brake Inspection",
                    "slug": "brake_inspection",
                    "durationMinutes": 60,
                    "properties": {
                        "required": [
                            {"name": "vehicle_make", "prompt": "What make is the vehicle?"},
                            {"name": "vehicle_year", "type": "number"},
                            {"name": "noise_present", "type": "boolean"},
                        ]
                    },
                },
            ],
            "service_constraints": {
                "max_services": 8,
                "max_required_properties_per_service": 3,
                "max_optional_properties_per_service": 2,
                "max_total_dynamic_columns": 40,
            },
            "business_hours": {
                "monday": "8:00 AM - 6:00 PM",
                "tuesday": "8:00 AM - 6:00 PM",
                "saturday": "Closed",
                "display": "Mon-Tue 8am-6pm",
            },
            "booking": {
                "advance_notice_required": "2 hours",
                "cancellation_policy": "Cancel 4 hours ahead.",
                "payment_methods": ["Cash", "Card"],
                "booking_instructions": "Collect vehicle details first.",
            },
            "faq": [{"question": "Loaner cars?", "answer": "Yes, for long repairs."}],
            "policies": {"no_show_policy": "Deposit after two no-shows."},
        },
        "runtime_variables": {
            "business_hours": "Weekdays 8-6",
            "crm_api_key": "env:ACME_CRM_API_KEY",
        },
    }


@pytest.fixture
def make_config(
    sample_document: dict[str, Any],
) -> Callable[..., SwitchboardConfig]:
    """Factory validating a (possibly modified) copy of the sample document.

    Example:
        >>> config = make_config(lambda doc: doc["client_data"].update(services=[]))
    """

    def _make(
        modify: Callable[[dict[str, Any]], None] | None = None,
    ) -> SwitchboardConfig:
        document = copy.deepcopy(sample_document)
        if modify is not None:
            modify(document)
        return ConfigurationLoader(environ={}).validate(document)

    return _make


@pytest.fixture
def sample_config(make_config: Callable[..., SwitchboardConfig]) -> SwitchboardConfig:
    """The sample document, validated."""
    return make_config()


@pytest.fixture
def compile_context(sample_config: SwitchboardConfig) -> CompileContext:
    """A compile context resolved from the sample configuration."""
    engine = ServiceSchemaEngine(
        sample_config.client_data.services,
        sample_config.client_data.service_constraints,
    )
    phases = VariableResolver(sample_config, engine, now=FIXED_NOW).resolve()
    identifiers = IdentifierGenerator(
        phases.business_name,
        phases.build.webhook_deployment,
        phases.build.base_webhook_url,
    )
    return CompileContext(
        phases=phases,
        schema_engine=engine,
        identifiers=identifiers,
        warnings=WarningCollector(),
    )


def source_file(relative_path: str, content: str | bytes | dict[str, Any]) -> SourceFile:
    """Build an in-memory source file."""
    if isinstance(content, dict):
        content = json.dumps(content, indent=2)
    if isinstance(content, str):
        content = content.encode("utf-8")
    return SourceFile(relative_path=relative_path, content=content)


def agent_document() -> dict[str, Any]:
    """A minimal agent descriptor with every field the build updates."""
    return {
        "agent_name": "Template Agent",
        "voice_id": "11labs-Adrian",
        "max_call_duration_ms": 300000,
        "interruption_sensitivity": 0.9,
        "version": 0,
        "version_title": "v0.0.1 Staging",
        "conversationFlow": {
            "global_prompt": "placeholder",
            "default_dynamic_variables": {"stale": "value"},
            "tools": [
                {
                    "type": "custom",
                    "name": "bookAppointment",
                    "url": "https://old.example/webhook/x",
                    "parameters": {},
                },
                {
                    "type": "custom",
                    "name": "modifyAppointment",
                    "url": "https://old.example/webhook/y",
                    "parameters": {},
                },
                {
                    "type": "custom",
                    "name": "answerQuestion",
                    "url": "https://old.example/webhook/z",
                    "parameters": {"type": "object"},
                },
                {"type": "end_call", "name": "end_call"},
            ],
            "nodes": [
                {
                    "id": "start",
                    "type": "conversation",
                    "instruction": {"type": "prompt", "text": "Greet the caller."},
                },
                {
                    "id": "transfer",
                    "type": "transfer_call",
                    "transfer_destination": {"type": "predefined", "number": "+10000000000"},
                },
            ],
        },
    }


def answer_workflow() -> dict[str, Any]:
    """A question-answering workflow with a webhook trigger."""
    return {
        "nodes": [
            {
                "name": "Webhook",
                "type": "n8n-nodes-base.webhook",
                "parameters": {"httpMethod": "POST", "path": "old-path"},
            },
            {
                "name": "Answer Agent",
                "type": "@n8n/n8n-nodes-langchain.agent",
                "parameters": {"options": {"systemMessage": "placeholder"}},
            },
        ],
        "connections": {
            "Webhook": {"main": [[{"node": "Answer Agent", "type": "main", "index": 0}]]}
        },
    }


def booking_workflow() -> dict[str, Any]:
    """A booking workflow with an inline script and a webhook trigger."""
    return {
        "name": "{{business_name}} - Booking",
        "nodes": [
            {
                "name": "Webhook",
                "type": "webhook",
                "parameters": {"path": "old-path"},
            },
            {
                "name": "Map Service",
                "type": "n8n-nodes-base.code",
                "parameters": {
                    "jsCode": (
                        "const serviceMapping = {{SERVICE_MAPPING}};\n"
                        "const requiredProperties = {\n  old: []\n};\n"
                        "return serviceMapping;"
                    )
                },
            },
        ],
        "connections": {
            "Webhook": {"main": [[{"node": "Map Service", "type": "main", "index": 0}]]}
        },
    }


CORE_PROMPT = (
    "You are the receptionist for {{business_name}}.\n"
    "Hours: {{business_hours}}\n\n"
    "{{SERVICE_PROPERTIES_GUIDE}}\n"
)
RAG_PROMPT = "Answer questions for {{business_name}}. Today is {{current_date}}.\n"


def write_source_tree(root: Path, extra: dict[str, str | bytes] | None = None) -> Path:
    """Write a complete source tree under root/src and return its path."""
    files: dict[str, str | bytes] = {
        AGENT_PATH: json.dumps(agent_document(), indent=2),
        CORE_PROMPT_PATH: CORE_PROMPT,
        RAG_PROMPT_PATH: RAG_PROMPT,
        "workflows/answerQuestion.json": json.dumps(answer_workflow(), indent=2),
        "workflows/bookAppointment.json": json.dumps(booking_workflow(), indent=2),
        "knowledge/overview.md": "# {{business_name}}\n\n{{services_list}}\n\n{{faq_list}}\n",
        "data/appointments.csv": "{{appointment_csv_headers}}\n",
    }
    if extra:
        files.update(extra)

    source_dir = root / "src"
    for relative, content in files.items():
        path = source_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return source_dir


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A complete source tree in a temporary directory."""
    return write_source_tree(tmp_path)


@pytest.fixture
def make_source() -> Callable[[str, str | bytes | dict[str, Any]], SourceFile]:
    """Factory for in-memory source files."""
    return source_file


@pytest.fixture
def agent_doc() -> dict[str, Any]:
    """A fresh agent descriptor document."""
    return agent_document()


@pytest.fixture
def answer_doc() -> dict[str, Any]:
    """A fresh question-answering workflow document."""
    return answer_workflow()


@pytest.fixture
def booking_doc() -> dict[str, Any]:
    """A fresh booking workflow document."""
    return booking_workflow()


@pytest.fixture
def make_source_tree() -> Callable[..., Path]:
    """Factory writing a complete source tree (plus extra files)."""
    return write_source_tree


@pytest.fixture
def service_factory() -> Callable[..., dict[str, Any]]:
    """Factory for service documents with numbered properties."""
    return make_service


@pytest.fixture
def fixed_now() -> datetime:
    """Build timestamp used where output must be reproducible."""
    return FIXED_NOW
