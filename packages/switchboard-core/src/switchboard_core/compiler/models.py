"""Compiler data models for switchboard.

This module defines the values that flow through a single build:
- ArtifactKind / SubstitutionPolicy: how a source file is compiled
- SourceFile: a discovered source file (path + raw bytes)
- Artifact: one compiled output, created at discovery, compiled once
- ResolvedPrompts: prompt texts handed from the first pass to the second
- BuildWarning / WarningCollector: recovered problems
- ArtifactRecord / TokenUsage / BuildReport: the build report contract
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from switchboard_core.errors import SwitchboardError

logger = structlog.get_logger(__name__)


class ArtifactKind(str, Enum):
    """Compilation strategy family of an artifact."""

    AGENT = "agent"
    WORKFLOW = "workflow"
    CONTENT = "content"


class SubstitutionPolicy(str, Enum):
    """Which placeholders are resolved at compile time.

    Values:
        STRUCTURAL: JSON strategies; values are injected into fields and
            Phase 1 placeholders resolved in string leaves (workflows).
        GENERATED_ONLY: Prompt files; only generated variables are
            resolved, every other placeholder survives for the runtime.
        FULL: Content files; every Phase 1 and Phase 4 placeholder is
            resolved.
    """

    STRUCTURAL = "structural"
    GENERATED_ONLY = "generated_only"
    FULL = "full"


@dataclass(frozen=True)
class SourceFile:
    """A source file discovered under the source directory.

    Attributes:
        relative_path: POSIX path relative to the source directory.
        content: Raw file bytes.
    """

    relative_path: str
    content: bytes

    @property
    def name(self) -> str:
        """Final path component."""
        return self.relative_path.rsplit("/", 1)[-1]

    @property
    def stem(self) -> str:
        """File name without its extension."""
        name = self.name
        return name.rsplit(".", 1)[0] if "." in name else name


@dataclass
class Artifact:
    """One compiled output file.

    Created when its source is discovered, compiled by exactly one
    strategy and written once.

    Attributes:
        kind: Strategy family.
        policy: Substitution policy.
        source: The source file.
        output_path: POSIX output path relative to the output directory.
        resolved_content: Compiled bytes, None until compiled.
        passthrough: True when the source could not be parsed and its
            original bytes are emitted unchanged.
    """

    kind: ArtifactKind
    policy: SubstitutionPolicy
    source: SourceFile
    output_path: str
    resolved_content: bytes | None = None
    passthrough: bool = False

    @property
    def source_path(self) -> str:
        """POSIX source path relative to the source directory."""
        return self.source.relative_path

    @property
    def raw_content(self) -> bytes:
        """Raw source bytes."""
        return self.source.content

    @property
    def is_prompt(self) -> bool:
        """True for prompt-classified artifacts (compiled in the first pass)."""
        return self.policy is SubstitutionPolicy.GENERATED_ONLY


@dataclass(frozen=True)
class ResolvedPrompts:
    """Prompt texts resolved by the first pass.

    Both texts have the generated collection guide substituted and still
    carry every runtime placeholder. Leading and trailing whitespace is
    stripped.

    Attributes:
        core: Primary prompt for the agent descriptor's global prompt.
        rag: Secondary prompt for the question-answering workflow.
    """

    core: str | None = None
    rag: str | None = None


class BuildWarning(BaseModel):
    """A recovered problem recorded during a build.

    Attributes:
        code: Stable machine-readable code (e.g. "artifact_parse_error").
        message: Human-readable message.
        source: Source path or configuration location, if known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str = Field(..., min_length=1, description="Warning code")
    message: str = Field(..., description="Human-readable message")
    source: str | None = Field(default=None, description="Where the problem was found")


@dataclass
class WarningCollector:
    """Collects build warnings and logs each one as it is recorded.

    Example:
        >>> warnings = WarningCollector()
        >>> warnings.warn("missing_section", "Missing section 'faq'")
        >>> len(warnings)
        1
    """

    items: list[BuildWarning] = field(default_factory=list)

    def warn(
        self,
        code: str,
        message: str,
        *,
        source: str | None = None,
        **context: Any,
    ) -> BuildWarning:
        """Record a warning and log it with structured context."""
        warning = BuildWarning(code=code, message=message, source=source)
        self.items.append(warning)
        logger.warning(code, message=message, source=source, **context)
        return warning

    def capture(
        self,
        error: SwitchboardError,
        code: str,
        *,
        source: str | None = None,
        **context: Any,
    ) -> BuildWarning:
        """Record a recovered error as a warning."""
        return self.warn(
            code,
            error.user_message,
            source=source,
            error_type=error.__class__.__name__,
            **context,
        )

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[BuildWarning]:
        return iter(self.items)


class ArtifactRecord(BaseModel):
    """Report entry for one written artifact."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_path: str = Field(..., description="Source path (POSIX, relative)")
    output_path: str = Field(..., description="Output path (POSIX, relative)")
    kind: ArtifactKind = Field(..., description="Strategy family")
    original_size: int = Field(..., ge=0, description="Source size in bytes")
    processed_size: int = Field(..., ge=0, description="Output size in bytes")


class TokenUsage(BaseModel):
    """Estimated token usage of the compiled agent and its knowledge.

    Attributes:
        global_prompt: Tokens in the agent's global prompt.
        node_instructions: Tokens in conversation node instructions.
        tool_schemas: Tokens in serialized tool definitions.
        knowledge_bases: Tokens in knowledge-base content files.
        dynamic_variables: Tokens in the serialized dynamic variable table.
        total: Sum of all categories.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    global_prompt: int = Field(default=0, ge=0)
    node_instructions: int = Field(default=0, ge=0)
    tool_schemas: int = Field(default=0, ge=0)
    knowledge_bases: int = Field(default=0, ge=0)
    dynamic_variables: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)


class BuildReport(BaseModel):
    """Summary of a completed build, written as build-info.json.

    Attributes:
        build_time: When the build started (UTC).
        version: Compiled agent version.
        artifacts: One entry per written artifact, in write order.
        warnings: Recovered problems.
        elapsed_ms: Build duration in milliseconds.
        token_usage: Token estimate, if an agent descriptor was compiled.

    Example:
        >>> report.total_files
        12
        >>> report.to_json()  # build-info.json content
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    build_time: datetime = Field(..., description="Build start time (UTC)")
    version: str = Field(..., description="Compiled agent version")
    artifacts: list[ArtifactRecord] = Field(default_factory=list)
    warnings: list[BuildWarning] = Field(default_factory=list)
    elapsed_ms: int = Field(default=0, ge=0)
    token_usage: TokenUsage | None = Field(default=None)

    @property
    def total_files(self) -> int:
        """Number of written artifacts."""
        return len(self.artifacts)

    @property
    def total_original_size(self) -> int:
        """Summed source sizes in bytes."""
        return sum(record.original_size for record in self.artifacts)

    @property
    def total_processed_size(self) -> int:
        """Summed output sizes in bytes."""
        return sum(record.processed_size for record in self.artifacts)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible report including totals."""
        data = self.model_dump(mode="json")
        data["totals"] = {
            "files": self.total_files,
            "original_size": self.total_original_size,
            "processed_size": self.total_processed_size,
            "warnings": len(self.warnings),
        }
        return data

    def to_json(self) -> str:
        """Serialized report, two-space indented."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"
