"""Unit tests for the configuration document sections."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from switchboard_core.schemas import (
    BusinessHours,
    ClientData,
    SwitchboardConfig,
    TemplatingConfig,
    WebhookDeployment,
)


class TestSwitchboardConfig:
    """Tests for the root model."""

    def test_empty_document_uses_defaults(self) -> None:
        """Every section has defaults."""
        config = SwitchboardConfig.model_validate({})
        assert config.templating.version == "1.0.0"
        assert config.client_data.services == []
        assert config.runtime_variables == {}

    def test_sample_document(self, sample_document: dict[str, Any]) -> None:
        """The sample document validates."""
        config = SwitchboardConfig.model_validate(sample_document)
        assert [s.slug for s in config.client_data.services] == ["oil_change", "brake_inspection"]
        assert config.build_config.voice_settings.max_call_duration_ms == 480000

    def test_unknown_top_level_section_tolerated(self) -> None:
        """The document is arbitrarily nested."""
        config = SwitchboardConfig.model_validate({"deployment_notes": {"a": 1}})
        assert config.templating.repository_name == "ai-voice-receptionist"

    def test_frozen(self) -> None:
        """The configuration is read-only once loaded."""
        config = SwitchboardConfig.model_validate({})
        with pytest.raises(ValidationError):
            config.runtime_variables = {}  # type: ignore[misc]


class TestTemplatingConfig:
    """Tests for TemplatingConfig."""

    @pytest.mark.parametrize("version", ["1.2", "one", "2024.03"])
    def test_loose_versions_accepted(self, version: str) -> None:
        """Any version string is kept; encoding pads missing parts."""
        assert TemplatingConfig(version=version).version == version

    def test_numeric_version_coerced(self) -> None:
        """A bare number in the document becomes a string."""
        assert TemplatingConfig.model_validate({"version": 1.2}).version == "1.2"

    def test_empty_version_rejected(self) -> None:
        """An empty version is not a version."""
        with pytest.raises(ValidationError):
            TemplatingConfig(version="")

    def test_prerelease_version(self) -> None:
        """Pre-release suffixes are accepted."""
        assert TemplatingConfig(version="2.0.0-beta.1").version == "2.0.0-beta.1"


class TestClientData:
    """Tests for ClientData."""

    def test_duplicate_slugs_rejected(self) -> None:
        """Service slugs are unique."""
        with pytest.raises(ValidationError, match="Duplicate service slug 'oil'"):
            ClientData.model_validate(
                {
                    "services": [
                        {"name": "Oil", "slug": "oil"},
                        {"name": "Oil Again", "slug": "oil"},
                    ]
                }
            )


class TestBusinessHours:
    """Tests for BusinessHours."""

    def test_open_days_skip_closed(self) -> None:
        """Closed and missing days are skipped, in weekday order."""
        hours = BusinessHours(friday="9-5", monday="8-6", sunday="CLOSED")
        assert hours.open_days() == [("monday", "8-6"), ("friday", "9-5")]


class TestWebhookDeployment:
    """Tests for WebhookDeployment."""

    def test_algorithm_normalized(self) -> None:
        """Algorithm names are case-insensitive."""
        assert WebhookDeployment(hash_algorithm="SHA256").hash_algorithm == "sha256"

    def test_unknown_algorithm_rejected(self) -> None:
        """Only hashlib's guaranteed algorithms are accepted."""
        with pytest.raises(ValidationError, match="Unsupported hash algorithm"):
            WebhookDeployment(hash_algorithm="whirlpool-ish")

    def test_variable_length_algorithm_rejected(self) -> None:
        """SHAKE digests have no fixed length."""
        with pytest.raises(ValidationError):
            WebhookDeployment(hash_algorithm="shake_128")

    @pytest.mark.parametrize("length", [3, 65])
    def test_hash_length_bounds(self, length: int) -> None:
        """Hash length is bounded 4..64."""
        with pytest.raises(ValidationError):
            WebhookDeployment(hash_length=length)

    def test_tools(self) -> None:
        """Tools map names to endpoint settings."""
        deployment = WebhookDeployment.model_validate(
            {"tools": {"bookAppointment": {"endpoint_base": "book"}}}
        )
        assert deployment.tools["bookAppointment"].endpoint_base == "book"
