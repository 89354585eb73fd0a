"""switchboard-core: Configuration compiler for AI voice receptionists.

This package provides:
- SwitchboardConfig: Pydantic schema for config.json
- ConfigurationLoader: Load, resolve and validate the configuration
- Compiler: Two-pass build of agent, workflow and content artifacts
- BuildReport: Output contract written as build-info.json
- JSON Schema export utilities
"""

from __future__ import annotations

__version__ = "0.1.0"

from switchboard_core.compiler import (
    BuildReport,
    BuildWarning,
    Compiler,
    ConfigurationLoader,
    EndpointIdentifier,
    IdentifierGenerator,
    ServiceSchemaEngine,
    VariableResolver,
    WarningCollector,
)
from switchboard_core.errors import (
    ArtifactParseError,
    ConfigurationError,
    ConstraintViolation,
    InjectionTargetNotFound,
    ReferenceResolutionError,
    SwitchboardError,
)
from switchboard_core.export import export_build_report_schema, export_config_schema
from switchboard_core.schemas import (
    BuildConfig,
    ClientData,
    PropertyType,
    Service,
    ServiceConstraints,
    ServiceProperty,
    SwitchboardConfig,
    TemplatingConfig,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "ConfigurationLoader",
    "VariableResolver",
    "ServiceSchemaEngine",
    "IdentifierGenerator",
    "EndpointIdentifier",
    "BuildReport",
    "BuildWarning",
    "WarningCollector",
    # Errors
    "SwitchboardError",
    "ConfigurationError",
    "ConstraintViolation",
    "ArtifactParseError",
    "ReferenceResolutionError",
    "InjectionTargetNotFound",
    # JSON Schema exports
    "export_config_schema",
    "export_build_report_schema",
    # Schema models
    "SwitchboardConfig",
    "TemplatingConfig",
    "BuildConfig",
    "ClientData",
    "Service",
    "ServiceProperty",
    "ServiceConstraints",
    "PropertyType",
]
