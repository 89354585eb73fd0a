"""Compiler class for switchboard.

This module implements the build pipeline that turns a validated
configuration and a source tree into deployable artifacts.

Two-Pass Ordering:
- Prompt-classified artifacts are compiled first; their resolved text is
  collected into a ResolvedPrompts value.
- Every other artifact is compiled second with that value in its
  context, so the agent descriptor and the question-answering workflow
  embed the prompts by value.

Everything is compiled in memory and written only once the whole build
has succeeded, so a fatal error leaves the output directory untouched.
"""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

import structlog

from switchboard_core.compiler.agent import compile_agent, register_agent_rules
from switchboard_core.compiler.content import collect_prompts, compile_text
from switchboard_core.compiler.models import (
    Artifact,
    ArtifactKind,
    ArtifactRecord,
    BuildReport,
    TokenUsage,
    WarningCollector,
)
from switchboard_core.compiler.registry import CompileContext, InjectionRegistry
from switchboard_core.compiler.service_schema import ServiceSchemaEngine
from switchboard_core.compiler.sources import (
    BUILD_INFO_FILE,
    classify,
    clean_output,
    discover_sources,
    write_output,
)
from switchboard_core.compiler.substitution import substitute_path
from switchboard_core.compiler.tokens import TokenEstimator
from switchboard_core.compiler.variables import VariableResolver
from switchboard_core.compiler.webhooks import IdentifierGenerator
from switchboard_core.compiler.workflow import compile_workflow, register_workflow_rules
from switchboard_core.errors import ArtifactParseError, ConfigurationError, SwitchboardError
from switchboard_core.schemas import SwitchboardConfig

logger = structlog.get_logger(__name__)

# Output paths containing this marker count as knowledge-base content
KNOWLEDGE_MARKER = "knowledge"


def default_registry() -> InjectionRegistry:
    """Registry holding the agent and workflow injection rules."""
    registry = InjectionRegistry()
    register_agent_rules(registry)
    register_workflow_rules(registry)
    return registry


class Compiler:
    """Compile a source tree against a configuration.

    Build order:
    - Validate service constraints (fatal, before anything else)
    - Resolve the four variable phases
    - Generate endpoint identifiers
    - Discover sources and plan output paths
    - First pass: prompt files, then collect the resolved prompts
    - Second pass: agent, workflow and content files
    - Write outputs and build-info.json

    Args:
        config: Validated configuration.
        source_dir: Root of the source templates.
        output_dir: Directory receiving compiled artifacts.
        warnings: Collector for recovered problems; shared with the
            configuration loader so its warnings reach the report.
        now: Build timestamp (default: current UTC time).
        registry: Injection rules (default: agent and workflow rules).

    Example:
        >>> config = ConfigurationLoader().load(Path("config.json"))
        >>> compiler = Compiler(config, Path("src"), Path("dist"))
        >>> report = compiler.build(clean=True)
        >>> report.total_files
        14
    """

    def __init__(
        self,
        config: SwitchboardConfig,
        source_dir: Path,
        output_dir: Path,
        *,
        warnings: WarningCollector | None = None,
        now: datetime | None = None,
        registry: InjectionRegistry | None = None,
    ) -> None:
        self.config = config
        self.source_dir = source_dir
        self.output_dir = output_dir
        self.warnings = warnings if warnings is not None else WarningCollector()
        self.now = now or datetime.now(UTC)
        self.registry = registry if registry is not None else default_registry()

    def build(self, clean: bool = False) -> BuildReport:
        """Run the full build.

        Args:
            clean: Remove the output directory before writing.

        Returns:
            BuildReport, also written to build-info.json.

        Raises:
            ConfigurationError: If the source directory is missing or the
                identifier settings collide.
            ConstraintViolation: If the service list exceeds its bounds.
            SwitchboardError: If two sources map to the same output path.
        """
        started = time.monotonic()
        logger.info(
            "build_started",
            source_dir=str(self.source_dir),
            output_dir=str(self.output_dir),
        )

        context = self.prepare()
        artifacts = self.plan(context.phases.template)

        prompts = [artifact for artifact in artifacts if artifact.is_prompt]
        remaining = [artifact for artifact in artifacts if not artifact.is_prompt]

        for artifact in prompts:
            self.compile_artifact(artifact, context)
        resolved_prompts = collect_prompts(
            [
                (artifact.output_path, artifact.resolved_content)
                for artifact in prompts
                if artifact.resolved_content is not None and not artifact.passthrough
            ],
            context,
        )
        context = replace(context, prompts=resolved_prompts)

        for artifact in remaining:
            self.compile_artifact(artifact, context)

        if clean:
            clean_output(self.output_dir)
        records = self.write(artifacts)

        report = BuildReport(
            build_time=self.now,
            version=self.config.templating.version,
            artifacts=records,
            warnings=list(self.warnings),
            elapsed_ms=int((time.monotonic() - started) * 1000),
            token_usage=self.estimate_tokens(artifacts),
        )
        write_output(self.output_dir, BUILD_INFO_FILE, report.to_json().encode("utf-8"))

        logger.info(
            "build_completed",
            files=report.total_files,
            warnings=len(report.warnings),
            elapsed_ms=report.elapsed_ms,
        )
        return report

    def prepare(self) -> CompileContext:
        """Validate services and resolve everything the strategies read."""
        schema_engine = ServiceSchemaEngine(
            self.config.client_data.services,
            self.config.client_data.service_constraints,
        )
        phases = VariableResolver(self.config, schema_engine, now=self.now).resolve()
        identifiers = IdentifierGenerator(
            phases.business_name,
            phases.build.webhook_deployment,
            phases.build.base_webhook_url,
        )
        return CompileContext(
            phases=phases,
            schema_engine=schema_engine,
            identifiers=identifiers,
            warnings=self.warnings,
        )

    def plan(self, template: Mapping[str, str]) -> list[Artifact]:
        """Discover sources and assign each one its kind and output path.

        Args:
            template: Phase 1 variables for file name substitution.
        """
        if not self.source_dir.is_dir():
            raise ConfigurationError(f"Source directory not found: {self.source_dir}")

        artifacts: list[Artifact] = []
        claimed: dict[str, str] = {BUILD_INFO_FILE: "<build report>"}
        for source in discover_sources(self.source_dir, exclude=(self.output_dir,)):
            kind, policy = classify(source.relative_path)
            output_path = substitute_path(source.relative_path, template)
            if output_path in claimed:
                raise SwitchboardError(
                    f"Sources '{claimed[output_path]}' and '{source.relative_path}' "
                    f"both compile to '{output_path}'"
                )
            claimed[output_path] = source.relative_path
            artifacts.append(
                Artifact(kind=kind, policy=policy, source=source, output_path=output_path)
            )

        logger.debug("build_planned", artifacts=len(artifacts))
        return artifacts

    def compile_artifact(self, artifact: Artifact, context: CompileContext) -> None:
        """Compile one artifact; unparseable sources pass through unchanged."""
        try:
            if artifact.kind is ArtifactKind.AGENT:
                content = compile_agent(artifact.source, context, self.registry)
            elif artifact.kind is ArtifactKind.WORKFLOW:
                content = compile_workflow(artifact.source, context, self.registry)
            else:
                content = compile_text(artifact.source, artifact.policy, context)
        except ArtifactParseError as e:
            context.warnings.capture(
                e,
                "artifact_parse_error",
                source=artifact.source_path,
                kind=artifact.kind.value,
            )
            content = artifact.raw_content
            artifact.passthrough = True
        artifact.resolved_content = content

    def write(self, artifacts: list[Artifact]) -> list[ArtifactRecord]:
        """Write compiled artifacts and describe them for the report."""
        records: list[ArtifactRecord] = []
        for artifact in artifacts:
            content = artifact.resolved_content
            if content is None:
                continue
            write_output(self.output_dir, artifact.output_path, content)
            records.append(
                ArtifactRecord(
                    source_path=artifact.source_path,
                    output_path=artifact.output_path,
                    kind=artifact.kind,
                    original_size=len(artifact.raw_content),
                    processed_size=len(content),
                )
            )
        logger.info("artifacts_written", count=len(records), output_dir=str(self.output_dir))
        return records

    def estimate_tokens(self, artifacts: list[Artifact]) -> TokenUsage:
        """Token usage of compiled agents and knowledge content."""
        estimator = TokenEstimator()
        for artifact in artifacts:
            content = artifact.resolved_content
            if content is None or artifact.passthrough:
                continue
            if artifact.kind is ArtifactKind.AGENT:
                estimator.count_agent(json.loads(content))
            elif KNOWLEDGE_MARKER in artifact.output_path.lower():
                estimator.count_knowledge(content.decode("utf-8"))
        return estimator.usage()
