"""Structural injection registry for switchboard.

Injection rules are registered per artifact kind as (selector, injector)
pairs. A selector decides from the source file whether the rule applies;
an injector mutates the parsed JSON document in place. Each rule is
independent: a rule whose target is missing records a warning and the
remaining rules still run.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from switchboard_core.compiler.models import (
    ArtifactKind,
    ResolvedPrompts,
    SourceFile,
    WarningCollector,
)
from switchboard_core.compiler.service_schema import ServiceSchemaEngine
from switchboard_core.compiler.variables import PhaseVariables
from switchboard_core.compiler.webhooks import IdentifierGenerator
from switchboard_core.errors import ReferenceResolutionError

logger = structlog.get_logger(__name__)

Selector = Callable[[SourceFile], bool]
Injector = Callable[[dict[str, Any], "CompileContext"], None]


@dataclass(frozen=True)
class CompileContext:
    """Everything a strategy or injector may read during one build.

    All members are read-only once the build starts; injectors mutate
    only the document they are handed.

    Attributes:
        phases: Resolved phase variables.
        schema_engine: Validated service schema engine.
        identifiers: Endpoint identifiers.
        prompts: Prompts resolved by the first pass.
        warnings: Collector for recovered problems.
    """

    phases: PhaseVariables
    schema_engine: ServiceSchemaEngine
    identifiers: IdentifierGenerator
    warnings: WarningCollector
    prompts: ResolvedPrompts = field(default_factory=ResolvedPrompts)


@dataclass(frozen=True)
class InjectionRule:
    """One independently testable injection.

    Attributes:
        name: Rule name used in logs and warnings.
        selector: Predicate on the source file.
        injector: In-place mutation of the parsed document.
    """

    name: str
    selector: Selector
    injector: Injector


def always(_source: SourceFile) -> bool:
    """Selector matching every source file."""
    return True


class InjectionRegistry:
    """Maps artifact kinds to their ordered injection rules.

    Example:
        >>> registry = InjectionRegistry()
        >>> registry.register(
        ...     ArtifactKind.AGENT,
        ...     InjectionRule("display_name", always, inject_display_name),
        ... )
        >>> registry.apply(ArtifactKind.AGENT, document, source, context)
        ['display_name']
    """

    def __init__(self) -> None:
        self._rules: dict[ArtifactKind, list[InjectionRule]] = {}

    def register(self, kind: ArtifactKind, rule: InjectionRule) -> None:
        """Append a rule; rules run in registration order."""
        rules = self._rules.setdefault(kind, [])
        if any(existing.name == rule.name for existing in rules):
            raise ValueError(f"Rule '{rule.name}' already registered for {kind.value}")
        rules.append(rule)

    def rules_for(self, kind: ArtifactKind) -> list[InjectionRule]:
        """Registered rules of a kind, in order."""
        return list(self._rules.get(kind, []))

    def apply(
        self,
        kind: ArtifactKind,
        document: dict[str, Any],
        source: SourceFile,
        context: CompileContext,
    ) -> list[str]:
        """Run every matching rule against a document.

        Returns:
            Names of the rules that completed.
        """
        applied: list[str] = []
        for rule in self._rules.get(kind, []):
            if not rule.selector(source):
                continue
            try:
                rule.injector(document, context)
            except ReferenceResolutionError as e:
                context.warnings.capture(
                    e,
                    "injection_target_missing",
                    source=source.relative_path,
                    rule=rule.name,
                )
                continue
            applied.append(rule.name)
            logger.debug("rule_applied", rule=rule.name, source=source.relative_path)
        return applied
