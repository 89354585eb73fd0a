"""Four-phase variable resolution for switchboard.

Each phase is built from an explicit, ordered list of sources. A key
takes its value from the first source that holds a non-empty value for
it; keys that are empty everywhere resolve to the last source's value.
Every phase is materialized once into a read-only mapping.

Phases:
1. Template variables: identity and build metadata (file names,
   workflow placeholders).
2. Build settings: typed values applied directly to target fields.
3. Runtime variables: the agent's dynamic variable table; their
   placeholders survive into prompts for the runtime to resolve.
4. Content variables: fully resolved into knowledge and tabular content.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any

import structlog

from switchboard_core.compiler.service_schema import ServiceSchemaEngine
from switchboard_core.schemas import BusinessHours, SwitchboardConfig, WebhookDeployment
from switchboard_core.schemas.client_data import DEFAULT_TIMEZONE

logger = structlog.get_logger(__name__)

DEFAULT_BUSINESS_NAME = "Business"
HOURS_FALLBACK = "Please contact us for hours"

# Generic repository tokens dropped when deriving a business name
_NAME_STOPWORDS = re.compile(r"\b(ai|voice|receptionist|template)\b", re.IGNORECASE)

_CONTENT_DEFAULTS: dict[str, str] = {
    "client_timezone": DEFAULT_TIMEZONE,
    "business_timezone": DEFAULT_TIMEZONE,
    "client_location": "Remote",
    "appointment_types": "General Services",
    "services_list": "No services configured.",
    "booking_advance_notice": "24 hours",
    "advance_notice_required": "24 hours",
    "cancellation_policy": "Please contact us for our cancellation policy.",
    "booking_instructions": "Contact us to schedule an appointment.",
    "faq_list": "Please contact us with any questions.",
    "faq_section": "Please contact us with any questions.",
    "policies_section": "No additional policies at this time.",
}


def stringify(value: Any) -> str:
    """Render a configuration value as a variable string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def generate_business_name(repository_name: str) -> str:
    """Derive a display name from a repository identifier.

    Example:
        >>> generate_business_name("acme-auto-ai-voice-receptionist")
        'Acme Auto'
    """
    name = repository_name.replace("-", " ").replace("_", " ")
    name = _NAME_STOPWORDS.sub("", name)
    name = " ".join(name.split())
    name = re.sub(r"\b\w", lambda m: m.group(0).upper(), name)
    return name or DEFAULT_BUSINESS_NAME


def format_business_hours(hours: BusinessHours) -> str:
    """Summarize opening hours as "Day: hours" pairs in weekday order."""
    days = hours.open_days()
    if not days:
        return HOURS_FALLBACK
    return ", ".join(f"{day.capitalize()}: {value}" for day, value in days)


def resolve_sources(*sources: Mapping[str, Any]) -> Mapping[str, str]:
    """Materialize an ordered list of sources, first non-empty value wins.

    Key order follows the lowest-precedence source first so output is
    stable regardless of which source supplies a value.

    Example:
        >>> resolve_sources({"a": "", "b": "x"}, {"a": "fallback", "c": "y"})
        mappingproxy({'a': 'fallback', 'c': 'y', 'b': 'x'})
    """
    keys: list[str] = []
    for source in reversed(sources):
        keys.extend(key for key in source if key not in keys)

    resolved: dict[str, str] = {}
    for key in keys:
        candidates = [stringify(source[key]) for source in sources if key in source]
        resolved[key] = next((c for c in candidates if c), candidates[-1])
    return MappingProxyType(resolved)


@dataclass(frozen=True)
class BuildSettings:
    """Phase 2: values applied directly to agent descriptor fields.

    Attributes:
        voice_id: Voice identifier.
        max_call_duration_ms: Call length limit.
        interruption_sensitivity: Interruption sensitivity (0..1).
        transfer_phone_number: Destination of transfer nodes.
        base_webhook_url: Base URL for callback endpoints.
        version_title_suffix: Suffix of the version title, if configured.
        webhook_deployment: Identifier settings and tool table.
    """

    voice_id: str
    max_call_duration_ms: int
    interruption_sensitivity: float
    transfer_phone_number: str
    base_webhook_url: str
    version_title_suffix: str | None
    webhook_deployment: WebhookDeployment


@dataclass(frozen=True)
class PhaseVariables:
    """The four resolved phases of one build.

    Attributes:
        template: Phase 1 mapping.
        build: Phase 2 settings.
        runtime: Phase 3 mapping.
        content: Phase 4 mapping.
    """

    template: Mapping[str, str]
    build: BuildSettings
    runtime: Mapping[str, str]
    content: Mapping[str, str]

    @property
    def business_name(self) -> str:
        """Phase 1 business name."""
        return self.template["business_name"]

    def full_content(self) -> Mapping[str, str]:
        """Phase 1 and Phase 4 merged; Phase 4 wins on conflicts."""
        return resolve_sources(self.content, self.template)


class VariableResolver:
    """Derives the four phase mappings from a loaded configuration.

    Phases are resolved strictly in order 1 -> 2 -> 3 -> 4; later phases
    read earlier phases only through their materialized mappings.

    Args:
        config: Loaded configuration.
        schema_engine: Validated service schema engine (supplies the
            CSV header and collection guide content variables).
        now: Build timestamp; defaults to the current UTC time.

    Example:
        >>> resolver = VariableResolver(config, engine)
        >>> phases = resolver.resolve()
        >>> phases.template["business_name"]
        'Acme Auto'
    """

    def __init__(
        self,
        config: SwitchboardConfig,
        schema_engine: ServiceSchemaEngine,
        now: datetime | None = None,
    ) -> None:
        self.config = config
        self.schema_engine = schema_engine
        self.now = now or datetime.now(UTC)

    def resolve(self) -> PhaseVariables:
        """Resolve all four phases in order."""
        template = self.resolve_template()
        build = self.resolve_build_settings()
        runtime = self.resolve_runtime(template)
        content = self.resolve_content()
        logger.debug(
            "variables_resolved",
            template=len(template),
            runtime=len(runtime),
            content=len(content),
        )
        return PhaseVariables(template=template, build=build, runtime=runtime, content=content)

    def resolve_template(self) -> Mapping[str, str]:
        """Phase 1: identity and build metadata."""
        templating = self.config.templating
        explicit = templating.variables

        if templating.auto_generate_from_repo:
            derived_name = generate_business_name(templating.repository_name)
        else:
            derived_name = DEFAULT_BUSINESS_NAME
        business_name = stringify(explicit.get("business_name")) or derived_name

        computed = {
            "build_date": self.now.date().isoformat(),
            "version": templating.version,
            "repository_name": templating.repository_name,
            "business_name": business_name,
            "agent_name": f"{business_name} Agent",
        }
        return resolve_sources(explicit, computed)

    def resolve_build_settings(self) -> BuildSettings:
        """Phase 2: typed build settings with defaults applied."""
        build_config = self.config.build_config
        return BuildSettings(
            voice_id=build_config.voice_settings.voice_id,
            max_call_duration_ms=build_config.voice_settings.max_call_duration_ms,
            interruption_sensitivity=build_config.voice_settings.interruption_sensitivity,
            transfer_phone_number=build_config.infrastructure.transfer_phone_number,
            base_webhook_url=build_config.infrastructure.base_webhook_url,
            version_title_suffix=build_config.version_settings.version_title_suffix,
            webhook_deployment=build_config.webhook_deployment,
        )

    def resolve_runtime(self, template: Mapping[str, str]) -> Mapping[str, str]:
        """Phase 3: seeded from Phase 1, explicit values first, then facts."""
        client_data = self.config.client_data
        info = client_data.business_info
        hours = client_data.business_hours
        explicit = self.config.runtime_variables

        facts = {
            "business_name": info.name,
            "business_description": info.tagline or info.description,
            "business_hours": hours.display,
            "business_timezone": info.timezone,
            "business_phone": info.phone,
            "appointment_types": ", ".join(s.name for s in client_data.services),
            "transfer_phone_number": (
                self.config.build_config.infrastructure.transfer_phone_number or info.phone
            ),
        }
        defaults = {
            "business_description": "",
            "business_hours": format_business_hours(hours),
            "business_timezone": DEFAULT_TIMEZONE,
            "business_phone": "",
            "appointment_types": "",
            "transfer_phone_number": "",
        }

        sources = (explicit, facts, template, defaults)
        business_hours = resolve_sources(*sources)["business_hours"]
        derived = {**defaults, "ai_support_hours": business_hours}
        return resolve_sources(explicit, facts, template, derived)

    def resolve_content(self) -> Mapping[str, str]:
        """Phase 4: fully-resolved content facts."""
        client_data = self.config.client_data
        info = client_data.business_info
        services = client_data.services
        booking = client_data.booking
        policies = client_data.policies
        hours = client_data.business_hours

        facts: dict[str, Any] = {
            "client_email": info.email,
            "client_phone": info.phone,
            "client_website": info.website,
            "client_timezone": info.timezone,
            "client_description": info.description,
            "client_tagline": info.tagline,
            "business_email": info.email,
            "business_phone": info.phone,
            "business_website": info.website,
            "business_timezone": info.timezone,
            "business_description": info.description,
            "business_tagline": info.tagline,
            "business_hours_display": hours.display or format_business_hours(hours),
            "business_hours_notes": hours.notes,
            "booking_advance_notice": booking.advance_notice_required,
            "advance_notice_required": booking.advance_notice_required,
            "cancellation_policy": booking.cancellation_policy,
            "booking_instructions": booking.booking_instructions,
            "payment_methods": ", ".join(booking.payment_methods),
            "no_show_policy": policies.no_show_policy,
            "late_arrival_policy": policies.late_arrival_policy,
            "refund_policy": policies.refund_policy,
            "policies_section": self._policies_section(),
            "faq_count": len(client_data.faq),
            "services_count": len(services),
            "service_names": ", ".join(s.name for s in services),
            "appointment_types": ", ".join(s.name for s in services),
            "services_list": self._services_list(),
            "appointment_csv_headers": self.schema_engine.csv_header_line(),
            "SERVICE_PROPERTIES_GUIDE": self.schema_engine.properties_guide(),
        }
        facts.update(self._address_variables())
        faq = self._faq_list()
        facts["faq_list"] = faq
        facts["faq_section"] = faq

        return resolve_sources(facts, _CONTENT_DEFAULTS)

    def _address_variables(self) -> dict[str, str]:
        address = self.config.client_data.business_info.address
        if address is None:
            return {}
        location = address.city
        if address.street:
            location = f"{address.street}, {address.city}, {address.state} {address.zip}".strip()
        return {
            "business_address_street": address.street,
            "business_address_city": address.city,
            "business_address_state": address.state,
            "business_address_zip": address.zip,
            "business_address_country": address.country,
            "business_address_full": address.full(),
            "client_location": location,
        }

    def _services_list(self) -> str:
        lines: list[str] = []
        for service in self.config.client_data.services:
            line = f"- **{service.name}** ({service.duration_minutes} minutes)"
            if service.description:
                line += f"\n  {service.description}"
            if service.price not in (None, ""):
                line += f" - ${service.price}"
            if service.properties.required:
                prompts = ", ".join(p.prompt or p.name for p in service.properties.required)
                line += f"\n  **Required Information:** {prompts}"
            if service.properties.optional:
                prompts = ", ".join(p.prompt or p.name for p in service.properties.optional)
                line += f"\n  **Optional Information:** {prompts}"
            lines.append(line)
        return "\n".join(lines)

    def _faq_list(self) -> str:
        return "\n\n".join(
            f"**Q: {entry.question}**\nA: {entry.answer}" for entry in self.config.client_data.faq
        )

    def _policies_section(self) -> str:
        policies = self.config.client_data.policies
        sections: list[str] = []
        if policies.no_show_policy:
            sections.append(f"**No-Show Policy:** {policies.no_show_policy}")
        if policies.late_arrival_policy:
            sections.append(f"**Late Arrival:** {policies.late_arrival_policy}")
        if policies.refund_policy:
            sections.append(f"**Refunds:** {policies.refund_policy}")
        return "\n\n".join(sections)
