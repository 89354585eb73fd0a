"""Schema definitions for switchboard.

This module exports the Pydantic models of the configuration document:

Root Model:
- SwitchboardConfig: Root schema for config.json

Sections:
- TemplatingConfig: Identity and build metadata inputs
- BuildConfig: Voice, infrastructure and webhook settings
- ClientData: Business facts, services and constraints

Services:
- PropertyType: Closed set of property primitive types
- ServiceProperty, ServiceProperties, Service, ServiceConstraints
"""

from __future__ import annotations

from switchboard_core.schemas.build_config import (
    BuildConfig,
    InfrastructureConfig,
    VersionSettings,
    VoiceSettings,
    WebhookDeployment,
    WebhookTool,
)
from switchboard_core.schemas.client_data import (
    WEEKDAYS,
    Address,
    BookingInfo,
    BusinessHours,
    BusinessInfo,
    ClientData,
    FAQEntry,
    Policies,
)
from switchboard_core.schemas.config_spec import SECTIONS, SwitchboardConfig
from switchboard_core.schemas.service import (
    PropertyType,
    Service,
    ServiceConstraints,
    ServiceProperties,
    ServiceProperty,
)
from switchboard_core.schemas.templating import TemplatingConfig

__all__ = [
    # Root
    "SwitchboardConfig",
    "SECTIONS",
    # Sections
    "TemplatingConfig",
    "BuildConfig",
    "VersionSettings",
    "VoiceSettings",
    "InfrastructureConfig",
    "WebhookDeployment",
    "WebhookTool",
    "ClientData",
    "BusinessInfo",
    "Address",
    "BusinessHours",
    "BookingInfo",
    "FAQEntry",
    "Policies",
    "WEEKDAYS",
    # Services
    "PropertyType",
    "ServiceProperty",
    "ServiceProperties",
    "Service",
    "ServiceConstraints",
]
