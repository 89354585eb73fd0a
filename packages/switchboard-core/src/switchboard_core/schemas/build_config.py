"""Build settings models for switchboard.

The build_config section holds values applied directly to target fields
of the agent descriptor (voice tuning, transfer number) and the webhook
settings used by the identifier generator. None of these values are
substituted through placeholders.
"""

from __future__ import annotations

import hashlib

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_VOICE_ID = "11labs-Ethan"
DEFAULT_MAX_CALL_DURATION_MS = 600000
DEFAULT_INTERRUPTION_SENSITIVITY = 0.65
DEFAULT_TRANSFER_PHONE_NUMBER = "1234567890"
DEFAULT_BASE_WEBHOOK_URL = "https://example.com"
DEFAULT_VERSION_TITLE_SUFFIX = "Demo"
DEFAULT_HASH_ALGORITHM = "sha256"
DEFAULT_HASH_LENGTH = 8


class VersionSettings(BaseModel):
    """Agent version title settings."""

    model_config = ConfigDict(frozen=True, extra="allow")

    version_title_suffix: str | None = Field(
        default=None,
        description="Suffix appended to the agent version title",
    )


class VoiceSettings(BaseModel):
    """Voice and call tuning applied to the agent descriptor.

    Attributes:
        voice_id: Voice identifier understood by the agent runtime.
        max_call_duration_ms: Hard call length limit in milliseconds.
        interruption_sensitivity: 0.0 (never interrupt) to 1.0.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    voice_id: str = Field(default=DEFAULT_VOICE_ID, min_length=1)
    max_call_duration_ms: int = Field(default=DEFAULT_MAX_CALL_DURATION_MS, ge=1)
    interruption_sensitivity: float = Field(
        default=DEFAULT_INTERRUPTION_SENSITIVITY,
        ge=0.0,
        le=1.0,
    )


class InfrastructureConfig(BaseModel):
    """Addresses of the external runtimes."""

    model_config = ConfigDict(frozen=True, extra="allow")

    transfer_phone_number: str = Field(default=DEFAULT_TRANSFER_PHONE_NUMBER)
    base_webhook_url: str = Field(
        default=DEFAULT_BASE_WEBHOOK_URL,
        description="Base URL of the workflow runtime",
    )


class WebhookTool(BaseModel):
    """A named external callback.

    Attributes:
        endpoint_base: Path prefix of the endpoint; defaults to the
            lower-cased tool name.
        description: Free-text description for deployment listings.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    endpoint_base: str | None = None
    description: str = ""


class WebhookDeployment(BaseModel):
    """Webhook identifier settings.

    Attributes:
        enabled: Informational flag for deployment tooling.
        hash_algorithm: hashlib algorithm used for endpoint identifiers.
        hash_length: Number of hex characters kept from the digest.
        tools: Logical tool name to endpoint settings.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    enabled: bool = False
    hash_algorithm: str = Field(default=DEFAULT_HASH_ALGORITHM)
    hash_length: int = Field(default=DEFAULT_HASH_LENGTH, ge=4, le=64)
    tools: dict[str, WebhookTool] = Field(default_factory=dict)

    @field_validator("hash_algorithm")
    @classmethod
    def validate_hash_algorithm(cls, value: str) -> str:
        """Accept only fixed-length digests that hashlib always provides."""
        algorithm = value.lower()
        if algorithm not in hashlib.algorithms_guaranteed or algorithm.startswith(
            "shake_"
        ):
            supported = sorted(
                a for a in hashlib.algorithms_guaranteed if not a.startswith("shake_")
            )
            raise ValueError(
                f"Unsupported hash algorithm '{value}'. Use one of: {', '.join(supported)}"
            )
        return algorithm


class BuildConfig(BaseModel):
    """The build_config section of the configuration document."""

    model_config = ConfigDict(frozen=True, extra="allow")

    version_settings: VersionSettings = Field(default_factory=VersionSettings)
    voice_settings: VoiceSettings = Field(default_factory=VoiceSettings)
    infrastructure: InfrastructureConfig = Field(default_factory=InfrastructureConfig)
    webhook_deployment: WebhookDeployment = Field(default_factory=WebhookDeployment)
