"""Client data models for switchboard.

The client_data section describes the business itself: contact details,
opening hours, bookable services, booking rules, FAQ entries and
policies. Its values feed content variables and the service schema
engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from switchboard_core.schemas.service import Service, ServiceConstraints

DEFAULT_TIMEZONE = "America/New_York"

# Fixed ordering used when formatting opening hours
WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class Address(BaseModel):
    """Postal address of the business."""

    model_config = ConfigDict(frozen=True, extra="allow")

    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""

    def full(self) -> str:
        """Non-empty address parts joined with commas."""
        parts = [self.street, self.city, self.state, self.zip, self.country]
        return ", ".join(part for part in parts if part)


class BusinessInfo(BaseModel):
    """Business contact details.

    Attributes:
        name: Business display name.
        tagline: Short marketing line.
        email: Contact email address.
        phone: Contact phone number.
        website: Public website URL.
        address: Postal address, if the business has a physical location.
        timezone: IANA timezone name.
        description: Longer business description.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""
    tagline: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""
    address: Address | None = None
    timezone: str = ""
    description: str = ""


class BusinessHours(BaseModel):
    """Opening hours keyed by lower-case weekday name.

    A day that is absent or marked "Closed" is treated as closed.
    `display` overrides the generated summary when given.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    monday: str | None = None
    tuesday: str | None = None
    wednesday: str | None = None
    thursday: str | None = None
    friday: str | None = None
    saturday: str | None = None
    sunday: str | None = None
    display: str = ""
    notes: str = ""

    def open_days(self) -> list[tuple[str, str]]:
        """Return (day, hours) pairs for open days in weekday order."""
        days: list[tuple[str, str]] = []
        for day in WEEKDAYS:
            hours = getattr(self, day)
            if hours and hours.strip().lower() != "closed":
                days.append((day, hours))
        return days


class BookingInfo(BaseModel):
    """Booking rules shown to callers."""

    model_config = ConfigDict(frozen=True, extra="allow")

    advance_notice_required: str = ""
    cancellation_policy: str = ""
    payment_methods: list[str] = Field(default_factory=list)
    booking_instructions: str = ""


class FAQEntry(BaseModel):
    """A single question/answer pair."""

    model_config = ConfigDict(frozen=True, extra="allow")

    question: str
    answer: str


class Policies(BaseModel):
    """Business policies rendered into knowledge content."""

    model_config = ConfigDict(frozen=True, extra="allow")

    no_show_policy: str = ""
    late_arrival_policy: str = ""
    refund_policy: str = ""


class ClientData(BaseModel):
    """The client_data section of the configuration document.

    Attributes:
        business_info: Business contact details.
        services: Bookable services (slugs must be unique).
        service_constraints: Structural bounds on the service list.
        business_hours: Opening hours.
        booking: Booking rules.
        faq: Frequently asked questions.
        policies: Business policies.

    Example:
        >>> data = ClientData(
        ...     business_info={"name": "Acme Auto"},
        ...     services=[{"name": "Oil Change", "slug": "oil_change"}],
        ... )
        >>> data.services[0].slug
        'oil_change'
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    services: list[Service] = Field(default_factory=list)
    service_constraints: ServiceConstraints = Field(
        default_factory=ServiceConstraints,
    )
    business_hours: BusinessHours = Field(default_factory=BusinessHours)
    booking: BookingInfo = Field(default_factory=BookingInfo)
    faq: list[FAQEntry] = Field(default_factory=list)
    policies: Policies = Field(default_factory=Policies)

    @field_validator("services")
    @classmethod
    def validate_unique_slugs(cls, services: list[Service]) -> list[Service]:
        """Reject service lists that reuse a slug."""
        seen: set[str] = set()
        for service in services:
            if service.slug in seen:
                raise ValueError(f"Duplicate service slug '{service.slug}'")
            seen.add(service.slug)
        return services
