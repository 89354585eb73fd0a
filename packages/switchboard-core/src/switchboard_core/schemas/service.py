"""Service models for switchboard.

This module defines the business-defined service records that drive
dynamic schema synthesis:
- PropertyType: Closed set of primitive property types
- ServiceProperty: One data field collected for a service
- ServiceProperties: Required and optional property lists
- Service: A bookable service with a unique slug
- ServiceConstraints: Structural bounds on services and properties
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self


class PropertyType(str, Enum):
    """Primitive types a service property can take.

    Values:
        STRING: Free text.
        NUMBER: Numeric value.
        BOOLEAN: Yes/no value.
        ENUM: One of a fixed list of options.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"


class ServiceProperty(BaseModel):
    """A data field the agent must (or may) collect for a service.

    Attributes:
        name: Property name (e.g. "vehicle_make").
        type: Primitive property type.
        prompt: Human-readable collection instruction.
        options: Allowed values for enum properties.

    Example:
        >>> prop = ServiceProperty(
        ...     name="pet_species",
        ...     type=PropertyType.ENUM,
        ...     prompt="What kind of pet is it?",
        ...     options=["dog", "cat"],
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Property name",
    )
    type: PropertyType = Field(
        default=PropertyType.STRING,
        description="Primitive property type",
    )
    prompt: str = Field(
        default="",
        description="Human-readable collection instruction",
    )
    options: list[str] = Field(
        default_factory=list,
        description="Allowed values (enum properties only)",
    )

    @model_validator(mode="after")
    def _options_only_for_enum(self) -> Self:
        if self.options and self.type is not PropertyType.ENUM:
            raise ValueError(
                f"Property '{self.name}' declares options but has type '{self.type.value}'"
            )
        return self


class ServiceProperties(BaseModel):
    """Required and optional properties of a service."""

    model_config = ConfigDict(frozen=True, extra="allow")

    required: list[ServiceProperty] = Field(default_factory=list)
    optional: list[ServiceProperty] = Field(default_factory=list)

    @property
    def count(self) -> int:
        """Total number of properties (required + optional)."""
        return len(self.required) + len(self.optional)

    @property
    def all(self) -> list[ServiceProperty]:
        """Required properties followed by optional properties."""
        return [*self.required, *self.optional]


class Service(BaseModel):
    """A bookable service offered by the business.

    Attributes:
        name: Display name (e.g. "Initial Consultation").
        slug: Unique machine-readable identifier.
        duration_minutes: Appointment length in minutes.
        description: Optional description for knowledge content.
        price: Optional price for knowledge content.
        properties: Service-specific data fields.

    Example:
        >>> service = Service(
        ...     name="Oil Change",
        ...     slug="oil_change",
        ...     duration_minutes=30,
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    slug: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Unique machine-readable identifier",
    )
    duration_minutes: int = Field(
        default=60,
        ge=1,
        le=24 * 60,
        alias="durationMinutes",
        description="Appointment length in minutes",
    )
    description: str = Field(default="", description="Service description")
    price: float | str | None = Field(default=None, description="Service price")
    properties: ServiceProperties = Field(
        default_factory=ServiceProperties,
        description="Service-specific data fields",
    )

    @model_validator(mode="after")
    def _unique_property_names(self) -> Self:
        seen: set[str] = set()
        for prop in self.properties.all:
            if prop.name in seen:
                raise ValueError(
                    f"Service '{self.slug}' declares property '{prop.name}' more than once"
                )
            seen.add(prop.name)
        return self


class ServiceConstraints(BaseModel):
    """Structural bounds a service list must satisfy.

    Attributes:
        max_services: Maximum number of services.
        max_required_properties_per_service: Maximum required properties per service.
        max_optional_properties_per_service: Maximum optional properties per service.
        max_total_dynamic_columns: Maximum properties summed across all services.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_services: int = Field(default=8, ge=0)
    max_required_properties_per_service: int = Field(default=3, ge=0)
    max_optional_properties_per_service: int = Field(default=2, ge=0)
    max_total_dynamic_columns: int = Field(default=40, ge=0)
