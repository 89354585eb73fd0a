"""Configuration loader for switchboard.

This module loads the configuration document and turns it into a
validated, environment-resolved SwitchboardConfig:
- ConfigurationLoader: discover, parse, resolve and validate
- Environment indirection: string leaves of the form "env:NAME"
- Default document when no configuration file exists

Discovery order: explicit path, then SWITCHBOARD_CONFIG, then
config.json in the project directory.
"""

from __future__ import annotations

import copy
import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from switchboard_core.compiler.models import WarningCollector
from switchboard_core.errors import ConfigurationError, ReferenceResolutionError
from switchboard_core.schemas import SECTIONS, SwitchboardConfig

logger = structlog.get_logger(__name__)

# Environment variable naming the configuration file
CONFIG_ENV_VAR = "SWITCHBOARD_CONFIG"

# Configuration file looked up in the project directory
CONFIG_FILE_NAME = "config.json"

# Prefix of environment indirections in string leaves
ENV_REFERENCE_PREFIX = "env:"

YAML_SUFFIXES = (".yaml", ".yml")

_DEFAULT_DOCUMENT: dict[str, Any] = {
    "templating": {
        "auto_generate_from_repo": False,
        "variables": {
            "business_name": "Default Business",
            "agent_name": "Default Agent",
        },
    },
    "build_config": {
        "version_settings": {"version_title_suffix": "Demo"},
        "voice_settings": {
            "voice_id": "11labs-Ethan",
            "max_call_duration_ms": 600000,
            "interruption_sensitivity": 0.65,
        },
        "infrastructure": {
            "transfer_phone_number": "1234567890",
            "base_webhook_url": "https://example.com",
        },
        "webhook_deployment": {
            "enabled": False,
            "hash_algorithm": "sha256",
            "hash_length": 8,
            "tools": {},
        },
    },
    "client_data": {
        "business_info": {
            "name": "Default Business",
            "tagline": "Your Business Tagline",
            "email": "contact@business.com",
            "phone": "+1234567890",
            "website": "https://business.com",
            "address": {
                "street": "",
                "city": "City",
                "state": "State",
                "zip": "",
                "country": "USA",
            },
            "timezone": "America/New_York",
            "description": "Default business description",
        },
        "services": [],
        "service_constraints": {
            "max_services": 8,
            "max_required_properties_per_service": 3,
            "max_optional_properties_per_service": 2,
            "max_total_dynamic_columns": 40,
        },
        "business_hours": {
            "monday": "9:00 AM - 5:00 PM",
            "tuesday": "9:00 AM - 5:00 PM",
            "wednesday": "9:00 AM - 5:00 PM",
            "thursday": "9:00 AM - 5:00 PM",
            "friday": "9:00 AM - 5:00 PM",
            "saturday": "Closed",
            "sunday": "Closed",
            "display": "Mon-Fri 9am-5pm, Sat-Sun closed",
        },
        "booking": {
            "advance_notice_required": "24 hours",
            "cancellation_policy": "24 hours notice required",
            "payment_methods": [],
            "booking_instructions": "Please call to schedule an appointment.",
        },
        "faq": [],
        "policies": {
            "no_show_policy": "",
            "late_arrival_policy": "",
            "refund_policy": "",
        },
    },
    "runtime_variables": {
        "business_name": "Default Business",
        "business_hours": "Mon-Fri 9am-5pm",
        "transfer_phone_number": "+1234567890",
    },
}


def default_document() -> dict[str, Any]:
    """Return a fresh copy of the built-in default document."""
    return copy.deepcopy(_DEFAULT_DOCUMENT)


def _format_location(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as a dotted path."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


class ConfigurationLoader:
    """Loads and validates the configuration document.

    Recovered problems (unresolved env references, missing sections,
    missing configuration file) are recorded on the warning collector;
    only a malformed document raises.

    Attributes:
        warnings: Collector receiving recovered problems.
        environ: Environment used for "env:NAME" resolution.

    Example:
        >>> loader = ConfigurationLoader()
        >>> config = loader.load(project_dir=Path("."))
        >>> config.client_data.business_info.name
        'Acme Auto'

        >>> # Validate an in-memory document
        >>> config = loader.validate({"templating": {}, "client_data": {}})
    """

    def __init__(
        self,
        warnings: WarningCollector | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.warnings = warnings if warnings is not None else WarningCollector()
        self.environ = environ if environ is not None else os.environ
        self.source_path: Path | None = None

    def find_config_file(self, project_dir: Path) -> Path | None:
        """Locate the configuration file.

        Args:
            project_dir: Directory searched for config.json.

        Returns:
            Path to the configuration file, or None if none exists.

        Raises:
            ConfigurationError: If SWITCHBOARD_CONFIG names a missing file.
        """
        env_path = self.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
            if not path.is_file():
                raise ConfigurationError(
                    f"Configuration file not found: {path}",
                    internal_details=f"{CONFIG_ENV_VAR}={env_path}",
                )
            return path

        candidate = project_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        return None

    def load(
        self,
        path: Path | None = None,
        project_dir: Path | None = None,
    ) -> SwitchboardConfig:
        """Load, resolve and validate the configuration document.

        Args:
            path: Explicit configuration file. If None, discovered via
                SWITCHBOARD_CONFIG and the project directory.
            project_dir: Directory searched for config.json (default: cwd).

        Returns:
            Validated SwitchboardConfig.

        Raises:
            ConfigurationError: If the document cannot be read, parsed or
                validated.
        """
        if path is not None and not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {path}")

        resolved = path or self.find_config_file(project_dir or Path.cwd())
        if resolved is None:
            self.warnings.warn(
                "config_not_found",
                f"Configuration file not found: {CONFIG_FILE_NAME}; using default configuration",
            )
            self.source_path = None
            return self.validate(default_document())

        logger.info("config_loading", path=str(resolved))
        self.source_path = resolved
        document = self.read_document(resolved)
        return self.validate(self.resolve_env_references(document))

    def read_document(self, path: Path) -> Any:
        """Parse a JSON or YAML configuration file."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Could not read configuration file {path}",
                internal_details=str(e),
            ) from e

        try:
            if path.suffix.lower() in YAML_SUFFIXES:
                return yaml.safe_load(text)
            return json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Configuration file {path.name} is not well-formed: {e}",
                internal_details=repr(e),
            ) from e

    def resolve_env_references(self, document: Any, context: str = "") -> Any:
        """Replace "env:NAME" string leaves with environment values.

        Unset variables keep the literal reference and record a warning.
        Returns a new structure; the input is not modified.
        """
        if isinstance(document, str):
            return self._resolve_env_value(document, context)
        if isinstance(document, list):
            return [
                self.resolve_env_references(item, f"{context}[{index}]")
                for index, item in enumerate(document)
            ]
        if isinstance(document, dict):
            return {
                key: self.resolve_env_references(
                    value, f"{context}.{key}" if context else str(key)
                )
                for key, value in document.items()
            }
        return document

    def _resolve_env_value(self, value: str, context: str) -> str:
        if not value.startswith(ENV_REFERENCE_PREFIX):
            return value

        name = value[len(ENV_REFERENCE_PREFIX) :]
        env_value = self.environ.get(name)
        if env_value is None:
            error = ReferenceResolutionError(
                name,
                f"Environment variable not found: {name} ({context}); keeping '{value}'",
            )
            self.warnings.capture(
                error, "env_reference_unresolved", source=context, variable=name
            )
            return value
        return env_value

    def validate(self, document: Any) -> SwitchboardConfig:
        """Validate a resolved document.

        Missing sections and missing optional fields produce warnings.

        Raises:
            ConfigurationError: If the document is not a mapping or a known
                field has the wrong type.
        """
        if not isinstance(document, dict):
            raise ConfigurationError(
                "Configuration document must be a key-value mapping, "
                f"got {type(document).__name__}"
            )

        for section in SECTIONS:
            if section not in document:
                self.warnings.warn(
                    "missing_section",
                    f"Missing configuration section: {section}",
                    source=section,
                )

        client_data = document.get("client_data")
        if isinstance(client_data, dict) and "business_info" not in client_data:
            self.warnings.warn(
                "missing_field",
                "Missing client_data.business_info",
                source="client_data.business_info",
            )
        build_config = document.get("build_config")
        if isinstance(build_config, dict) and "infrastructure" not in build_config:
            self.warnings.warn(
                "missing_field",
                "Missing build_config.infrastructure",
                source="build_config.infrastructure",
            )

        try:
            return SwitchboardConfig.model_validate(document)
        except ValidationError as e:
            first = e.errors()[0]
            loc = tuple(first.get("loc", ()))
            section = str(loc[0]) if loc else None
            field_path = _format_location(loc[1:]) if len(loc) > 1 else None
            message = str(first.get("msg", "Invalid value"))
            # Drop pydantic's "Value error, " prefix from custom validators
            message = message.removeprefix("Value error, ")
            raise ConfigurationError(
                message,
                section=section,
                field_path=field_path,
                internal_details=str(e),
            ) from e
