"""Shared test fixtures for switchboard-cli tests.

Provides CliRunner fixtures and a small project (config.json plus a
source tree) in a temporary working directory.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

CONFIG_FILENAME = "config.json"


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance whose working directory is a fresh temp dir.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


def config_document() -> dict[str, Any]:
    """A small configuration with two services and four tools."""
    return {
        "templating": {
            "version": "2.1.0",
            "variables": {"business_name": "Acme Auto"},
        },
        "build_config": {
            "infrastructure": {
                "transfer_phone_number": "+15555550100",
                "base_webhook_url": "https://n8n.example.com",
            },
            "webhook_deployment": {
                "tools": {
                    "bookAppointment": {"endpoint_base": "bookappointment"},
                    "answerQuestion": {"endpoint_base": "answerquestion"},
                    "modifyAppointment": {"endpoint_base": "modifyappointment"},
                    "logLead": {"endpoint_base": "loglead"},
                }
            },
        },
        "client_data": {
            "business_info": {"name": "Acme Auto", "timezone": "America/Chicago"},
            "services": [
                {
                    "name": "Oil Change",
                    "slug": "oil_change",
                    "properties": {
                        "required": [
                            {"name": "vehicle_make"},
                            {"name": "vehicle_model"},
                            {"name": "oil_type"},
                        ]
                    },
                },
                {
                    "name": "Brake Inspection",
                    "slug": "brake_inspection",
                    "properties": {
                        "required": [
                            {"name": "vehicle_make"},
                            {"name": "vehicle_year", "type": "number"},
                            {"name": "noise_present", "type": "boolean"},
                        ]
                    },
                },
            ],
        },
        "runtime_variables": {"business_hours": "Weekdays 8-6"},
    }


SOURCE_FILES: dict[str, Any] = {
    "{{business_name}} - Retell Agent.json": {
        "agent_name": "Template",
        "version": 0,
        "conversationFlow": {
            "global_prompt": "",
            "default_dynamic_variables": {},
            "tools": [
                {"type": "custom", "name": "bookAppointment", "url": "", "parameters": {}},
                {"type": "custom", "name": "modifyAppointment", "url": "", "parameters": {}},
                {"type": "custom", "name": "answerQuestion", "url": "", "parameters": {}},
            ],
            "nodes": [],
        },
    },
    "prompts/{{business_name}} Core Prompt.md": (
        "You answer calls for {{business_name}}.\n\n{{SERVICE_PROPERTIES_GUIDE}}\n"
    ),
    "workflows/logLead.json": {
        "nodes": [{"name": "Webhook", "type": "webhook", "parameters": {"path": "lead"}}],
        "connections": {},
    },
    "knowledge/overview.md": "# {{business_name}}\n\n{{services_list}}\n",
    "data/appointments.csv": "{{appointment_csv_headers}}\n",
}


def write_project(
    root: Path,
    config: dict[str, Any] | None = None,
    extra: dict[str, Any] | None = None,
) -> Path:
    """Write config.json and src/ under root and return root."""
    (root / CONFIG_FILENAME).write_text(
        json.dumps(config if config is not None else config_document(), indent=2),
        encoding="utf-8",
    )
    files = {**SOURCE_FILES, **(extra or {})}
    for relative, content in files.items():
        path = root / "src" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, dict):
            content = json.dumps(content, indent=2)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def project(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """A complete project in the current working directory."""
    monkeypatch.delenv("SWITCHBOARD_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return write_project(tmp_path)


@pytest.fixture
def make_project(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[..., Path]:
    """Factory for a project with a modified config or extra sources."""
    monkeypatch.delenv("SWITCHBOARD_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)

    def _make(
        modify: Callable[[dict[str, Any]], None] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> Path:
        config = config_document()
        if modify is not None:
            modify(config)
        return write_project(tmp_path, config, extra)

    return _make
