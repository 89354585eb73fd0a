"""Service schema engine for switchboard.

Validates the configured services against their structural constraints
and synthesizes, from that list:
- JSON schema fragments for the booking and modification tools
- The appointment CSV column layout
- A conversational guide of the data to collect per service
- Service mappings embedded into workflow scripts

Validation runs when the engine is constructed, so no schema can be
generated from a service list that violates a constraint.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Any

import structlog

from switchboard_core.errors import ConstraintViolation
from switchboard_core.schemas import (
    PropertyType,
    Service,
    ServiceConstraints,
    ServiceProperty,
)

logger = structlog.get_logger(__name__)

# Fixed leading columns of the appointment spreadsheet
BASE_CSV_COLUMNS: tuple[str, ...] = (
    "Appointment ID",
    "Customer Name",
    "Customer Phone",
    "Customer Email",
    "Appointment Date",
    "Appointment Time",
    "Service Type",
    "Status",
    "Notes",
    "Created At",
    "Updated At",
)

CONTACT_METHODS: tuple[str, ...] = ("phone", "email", "text")

NO_PROPERTIES_GUIDE = "No service-specific properties required."
GUIDE_HEADER = "Service-Specific Information to Collect:"

_JSON_TYPES: dict[PropertyType, str] = {
    PropertyType.STRING: "string",
    PropertyType.NUMBER: "number",
    PropertyType.BOOLEAN: "boolean",
    PropertyType.ENUM: "string",
}


def title_case_property(name: str) -> str:
    """Convert a snake-case property name to title-case words.

    Example:
        >>> title_case_property("vehicle_make")
        'Vehicle Make'
    """
    return " ".join(word[:1].upper() + word[1:] for word in name.split("_"))


def column_name(service: Service, prop: ServiceProperty) -> str:
    """CSV column name of a service property."""
    return f"{service.name} - {title_case_property(prop.name)}"


def validate_constraints(services: list[Service], constraints: ServiceConstraints) -> int:
    """Check a service list against its structural bounds.

    Args:
        services: Configured services.
        constraints: Bounds to enforce.

    Returns:
        Total number of dynamic columns (sum of all property counts).

    Raises:
        ConstraintViolation: On the first violated bound.
    """
    if len(services) > constraints.max_services:
        raise ConstraintViolation(
            constraint="max_services",
            limit=constraints.max_services,
            actual=len(services),
        )

    total_columns = 0
    for service in services:
        required_count = len(service.properties.required)
        optional_count = len(service.properties.optional)

        if required_count > constraints.max_required_properties_per_service:
            raise ConstraintViolation(
                constraint="max_required_properties_per_service",
                limit=constraints.max_required_properties_per_service,
                actual=required_count,
                service_name=service.name,
            )
        if optional_count > constraints.max_optional_properties_per_service:
            raise ConstraintViolation(
                constraint="max_optional_properties_per_service",
                limit=constraints.max_optional_properties_per_service,
                actual=optional_count,
                service_name=service.name,
            )
        total_columns += required_count + optional_count

    if total_columns > constraints.max_total_dynamic_columns:
        raise ConstraintViolation(
            constraint="max_total_dynamic_columns",
            limit=constraints.max_total_dynamic_columns,
            actual=total_columns,
        )
    return total_columns


@dataclass(frozen=True)
class WorkflowServiceConfig:
    """Service structures embedded into workflow scripts.

    Attributes:
        service_mapping: slug -> display name.
        required_properties: slug -> required property names.
        column_mapping: slug -> property name -> CSV column.
        reverse_column_mapping: CSV column -> {service, property}.
    """

    service_mapping: dict[str, str] = field(default_factory=dict)
    required_properties: dict[str, list[str]] = field(default_factory=dict)
    column_mapping: dict[str, dict[str, str]] = field(default_factory=dict)
    reverse_column_mapping: dict[str, dict[str, str]] = field(default_factory=dict)


class ServiceSchemaEngine:
    """Synthesizes schemas and layouts from a validated service list.

    Attributes:
        services: Configured services, in configuration order.
        constraints: Bounds the services were validated against.
        dynamic_column_count: Sum of required + optional properties.

    Example:
        >>> engine = ServiceSchemaEngine(config.client_data.services)
        >>> engine.appointment_schema()["required"]
        ['name', 'phone', 'email', ...]
        >>> len(engine.csv_columns())
        17
    """

    def __init__(
        self,
        services: list[Service],
        constraints: ServiceConstraints | None = None,
    ) -> None:
        self.services = list(services)
        self.constraints = constraints or ServiceConstraints()
        self.dynamic_column_count = validate_constraints(self.services, self.constraints)
        logger.debug(
            "services_validated",
            services=len(self.services),
            dynamic_columns=self.dynamic_column_count,
        )

    @staticmethod
    def _property_schema(prop: ServiceProperty) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": _JSON_TYPES[prop.type],
            "description": prop.prompt or title_case_property(prop.name),
        }
        if prop.type is PropertyType.ENUM and prop.options:
            schema["enum"] = list(prop.options)
        return schema

    def properties_schema(self) -> dict[str, Any]:
        """Per-service property schema keyed by slug.

        Every service gets an entry whose `required` list equals exactly
        its configured required property names.
        """
        properties: dict[str, Any] = {}
        for service in self.services:
            properties[service.slug] = {
                "type": "object",
                "properties": {
                    prop.name: self._property_schema(prop) for prop in service.properties.all
                },
                "additionalProperties": False,
                "required": [prop.name for prop in service.properties.required],
            }
        return {
            "type": "object",
            "properties": properties,
            "additionalProperties": False,
        }

    def selection_schema(self) -> dict[str, Any]:
        """One boolean flag per service slug."""
        return {
            "type": "object",
            "properties": {
                service.slug: {
                    "type": "boolean",
                    "description": f"Set to true if appointment is for {service.name}",
                }
                for service in self.services
            },
            "additionalProperties": False,
        }

    def appointment_schema(self) -> dict[str, Any]:
        """Parameter schema of the booking tool."""
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Full name of the caller"},
                "phone": {
                    "type": "string",
                    "description": "10-digit phone number, optional extension (e.g., 1234567890x123)",
                },
                "email": {"type": "string", "description": "Customer email address"},
                "preferred_contact_method": {
                    "type": "string",
                    "description": "Preferred method of contact",
                    "enum": list(CONTACT_METHODS),
                },
                "date": {
                    "type": "string",
                    "description": "Appointment date in YYYY-MM-DD format",
                },
                "time": {
                    "type": "string",
                    "description": "Appointment time in 24-hour format HH:MM (local time)",
                },
                "timezone": {
                    "type": "string",
                    "description": (
                        "Timezone for the appointment (e.g., America/Chicago). "
                        "Use value from dayAndTime tool."
                    ),
                },
                "service": self.selection_schema(),
                "service_properties": self.properties_schema(),
                "notes": {
                    "type": "string",
                    "description": "Any additional notes as plain language.",
                },
            },
            "required": [
                "name",
                "phone",
                "email",
                "preferred_contact_method",
                "date",
                "time",
                "timezone",
                "service",
                "service_properties",
            ],
        }

    def modify_schema(self) -> dict[str, Any]:
        """Schema of the `updates` object of the modification tool.

        No field is required; a modification carries only what changes.
        """
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Updated customer name"},
                "phone": {"type": "string", "description": "Updated phone number"},
                "email": {"type": "string", "description": "Updated email address"},
                "preferred_contact_method": {
                    "type": "string",
                    "description": "Updated preferred contact method",
                    "enum": list(CONTACT_METHODS),
                },
                "date": {
                    "type": "string",
                    "description": "Updated appointment date in YYYY-MM-DD format",
                },
                "time": {
                    "type": "string",
                    "description": "Updated appointment time in HH:MM 24-hour format",
                },
                "timezone": {
                    "type": "string",
                    "description": (
                        "Updated IANA timezone (e.g., 'America/Chicago'). "
                        "Use {{timezone}} variable."
                    ),
                },
                "service": self.selection_schema(),
                "service_properties": self.properties_schema(),
                "notes": {"type": "string", "description": "Updated appointment notes"},
            },
        }

    def modify_tool_parameters(self) -> dict[str, Any]:
        """Full parameter schema of the modification tool."""
        return {
            "type": "object",
            "properties": {
                "appointment_id": {
                    "type": "string",
                    "description": "Unique identifier for the appointment to modify",
                },
                "updates": self.modify_schema(),
            },
            "required": ["appointment_id", "updates"],
        }

    def csv_columns(self) -> list[str]:
        """Base columns followed by one column per service property."""
        dynamic = [
            column_name(service, prop)
            for service in self.services
            for prop in service.properties.all
        ]
        return [*BASE_CSV_COLUMNS, *dynamic]

    def csv_header_line(self) -> str:
        """CSV-encoded header row (no line terminator)."""
        buffer = io.StringIO()
        csv.writer(buffer, lineterminator="").writerow(self.csv_columns())
        return buffer.getvalue()

    def properties_guide(self) -> str:
        """Conversational listing of the data to collect per service."""
        with_properties = [s for s in self.services if s.properties.count > 0]
        if not with_properties:
            return NO_PROPERTIES_GUIDE

        lines = [GUIDE_HEADER, ""]
        for service in with_properties:
            lines.append(f"{service.name}:")
            if service.properties.required:
                lines.append("  Required:")
                lines.extend(f"    - {p.prompt or p.name}" for p in service.properties.required)
            if service.properties.optional:
                lines.append("  Optional:")
                lines.extend(f"    - {p.prompt or p.name}" for p in service.properties.optional)
            lines.append("")
        return "\n".join(lines).strip()

    def workflow_config(self) -> WorkflowServiceConfig:
        """Service structures for workflow script injection."""
        config = WorkflowServiceConfig()
        for service in self.services:
            config.service_mapping[service.slug] = service.name
            config.required_properties[service.slug] = [
                prop.name for prop in service.properties.required
            ]
            if service.properties.count:
                columns = {prop.name: column_name(service, prop) for prop in service.properties.all}
                config.column_mapping[service.slug] = columns
                for prop_name, column in columns.items():
                    config.reverse_column_mapping[column] = {
                        "service": service.slug,
                        "property": prop_name,
                    }
        return config
