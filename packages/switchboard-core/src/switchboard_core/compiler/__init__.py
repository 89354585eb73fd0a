"""Compiler module for switchboard.

This module exports the build pipeline and its components:
- Compiler: Two-pass build orchestrator
- ConfigurationLoader: Load and validate the configuration document
- VariableResolver: Four-phase variable resolution
- ServiceSchemaEngine: Service schemas, CSV columns and collection guide
- IdentifierGenerator: Deterministic endpoint hashes and URLs
- InjectionRegistry: Structural injection rules per artifact kind
- BuildReport: Output contract written as build-info.json
"""

from __future__ import annotations

from switchboard_core.compiler.compiler import Compiler, default_registry
from switchboard_core.compiler.config_loader import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    ConfigurationLoader,
    default_document,
)
from switchboard_core.compiler.models import (
    Artifact,
    ArtifactKind,
    ArtifactRecord,
    BuildReport,
    BuildWarning,
    ResolvedPrompts,
    SourceFile,
    SubstitutionPolicy,
    TokenUsage,
    WarningCollector,
)
from switchboard_core.compiler.registry import (
    CompileContext,
    InjectionRegistry,
    InjectionRule,
)
from switchboard_core.compiler.service_schema import (
    BASE_CSV_COLUMNS,
    ServiceSchemaEngine,
    WorkflowServiceConfig,
    validate_constraints,
)
from switchboard_core.compiler.sources import BUILD_INFO_FILE, classify, clean_output
from switchboard_core.compiler.substitution import substitute
from switchboard_core.compiler.variables import (
    BuildSettings,
    PhaseVariables,
    VariableResolver,
)
from switchboard_core.compiler.webhooks import (
    EndpointIdentifier,
    IdentifierGenerator,
    build_url,
    endpoint_hash,
)

__all__: list[str] = [
    # Compiler
    "Compiler",
    "default_registry",
    "BUILD_INFO_FILE",
    "classify",
    "clean_output",
    # Configuration
    "ConfigurationLoader",
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "default_document",
    # Variables
    "VariableResolver",
    "PhaseVariables",
    "BuildSettings",
    "substitute",
    # Services
    "ServiceSchemaEngine",
    "WorkflowServiceConfig",
    "BASE_CSV_COLUMNS",
    "validate_constraints",
    # Identifiers
    "IdentifierGenerator",
    "EndpointIdentifier",
    "endpoint_hash",
    "build_url",
    # Injection
    "InjectionRegistry",
    "InjectionRule",
    "CompileContext",
    # Models
    "Artifact",
    "ArtifactKind",
    "SubstitutionPolicy",
    "SourceFile",
    "ResolvedPrompts",
    "BuildWarning",
    "WarningCollector",
    "ArtifactRecord",
    "TokenUsage",
    "BuildReport",
]
