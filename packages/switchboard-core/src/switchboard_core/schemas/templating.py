"""Templating section model for switchboard."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REPOSITORY_NAME = "ai-voice-receptionist"
DEFAULT_VERSION = "1.0.0"


class TemplatingConfig(BaseModel):
    """Identity and build metadata inputs.

    Attributes:
        auto_generate_from_repo: Derive the business name from the
            repository name when no explicit name is configured.
        repository_name: Repository identifier used for name derivation.
        version: Semantic version of the compiled agent; missing or
            non-numeric parts count as 0.
        variables: Explicit identity values (business_name, agent_name, ...).
    """

    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)

    auto_generate_from_repo: bool = True
    repository_name: str = Field(default=DEFAULT_REPOSITORY_NAME, min_length=1)
    version: str = Field(default=DEFAULT_VERSION, min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)
