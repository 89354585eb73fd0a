"""Unit tests for ConfigurationLoader."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from switchboard_core.compiler.config_loader import (
    CONFIG_ENV_VAR,
    ConfigurationLoader,
    default_document,
)
from switchboard_core.compiler.models import WarningCollector
from switchboard_core.errors import ConfigurationError


def _codes(warnings: WarningCollector) -> list[str]:
    return [w.code for w in warnings]


class TestFindConfigFile:
    """Tests for configuration file discovery."""

    def test_project_config_json(self, tmp_path: Path) -> None:
        """config.json in the project directory is found."""
        (tmp_path / "config.json").write_text("{}")
        loader = ConfigurationLoader(environ={})
        assert loader.find_config_file(tmp_path) == tmp_path / "config.json"

    def test_env_var_takes_precedence(self, tmp_path: Path) -> None:
        """SWITCHBOARD_CONFIG wins over the project file."""
        (tmp_path / "config.json").write_text("{}")
        other = tmp_path / "other.yaml"
        other.write_text("{}")
        loader = ConfigurationLoader(environ={CONFIG_ENV_VAR: str(other)})
        assert loader.find_config_file(tmp_path) == other

    def test_env_var_missing_file(self, tmp_path: Path) -> None:
        """An environment override naming a missing file is an error."""
        loader = ConfigurationLoader(environ={CONFIG_ENV_VAR: str(tmp_path / "nope.json")})
        with pytest.raises(ConfigurationError, match="not found"):
            loader.find_config_file(tmp_path)

    def test_nothing_found(self, tmp_path: Path) -> None:
        """No file and no override returns None."""
        assert ConfigurationLoader(environ={}).find_config_file(tmp_path) is None


class TestLoad:
    """Tests for ConfigurationLoader.load()."""

    def test_load_json(self, tmp_path: Path, sample_document: dict[str, Any]) -> None:
        """A JSON document loads and validates."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_document))
        config = ConfigurationLoader(environ={}).load(path)
        assert config.client_data.business_info.name == "Acme Auto"

    def test_load_yaml(self, tmp_path: Path, sample_document: dict[str, Any]) -> None:
        """A YAML document loads through safe_load."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(sample_document))
        config = ConfigurationLoader(environ={}).load(path)
        assert len(config.client_data.services) == 2

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        """An explicitly named file must exist."""
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigurationLoader(environ={}).load(tmp_path / "missing.json")

    def test_missing_discovered_file_uses_default(self, tmp_path: Path) -> None:
        """Without a file the built-in default document is used."""
        warnings = WarningCollector()
        config = ConfigurationLoader(warnings, environ={}).load(project_dir=tmp_path)
        assert config.client_data.business_info.name == "Default Business"
        assert _codes(warnings) == ["config_not_found"]

    def test_malformed_json(self, tmp_path: Path) -> None:
        """A parse failure is fatal."""
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="not well-formed"):
            ConfigurationLoader(environ={}).load(path)

    def test_source_path_recorded(self, tmp_path: Path) -> None:
        """The loaded file is remembered."""
        path = tmp_path / "config.json"
        path.write_text("{}")
        loader = ConfigurationLoader(environ={})
        loader.load(path)
        assert loader.source_path == path


class TestEnvReferences:
    """Tests for "env:NAME" resolution."""

    def test_resolved_from_environment(self) -> None:
        """Set variables replace the reference."""
        loader = ConfigurationLoader(environ={"API_KEY": "secret"})
        document = {"runtime_variables": {"key": "env:API_KEY"}}
        resolved = loader.resolve_env_references(document)
        assert resolved["runtime_variables"]["key"] == "secret"

    def test_unset_keeps_literal_and_warns(self) -> None:
        """Unset variables keep the literal and record a warning."""
        warnings = WarningCollector()
        loader = ConfigurationLoader(warnings, environ={})
        document = {"runtime_variables": {"key": "env:API_KEY"}}

        resolved = loader.resolve_env_references(document)

        assert resolved["runtime_variables"]["key"] == "env:API_KEY"
        assert _codes(warnings) == ["env_reference_unresolved"]
        assert warnings.items[0].source == "runtime_variables.key"

    def test_nested_lists(self) -> None:
        """References inside lists are resolved."""
        loader = ConfigurationLoader(environ={"A": "1"})
        assert loader.resolve_env_references({"x": ["env:A", 2, None]}) == {"x": ["1", 2, None]}

    def test_input_not_modified(self) -> None:
        """Resolution returns a new structure."""
        loader = ConfigurationLoader(environ={"A": "1"})
        document = {"x": "env:A"}
        loader.resolve_env_references(document)
        assert document == {"x": "env:A"}

    def test_unresolved_reference_survives_load(
        self, tmp_path: Path, sample_document: dict[str, Any]
    ) -> None:
        """An unset reference reaches the runtime variables unchanged."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_document))
        warnings = WarningCollector()
        config = ConfigurationLoader(warnings, environ={}).load(path)
        assert config.runtime_variables["crm_api_key"] == "env:ACME_CRM_API_KEY"
        assert "env_reference_unresolved" in _codes(warnings)


class TestValidate:
    """Tests for ConfigurationLoader.validate()."""

    def test_non_mapping_rejected(self) -> None:
        """The document must be an object."""
        with pytest.raises(ConfigurationError, match="key-value mapping"):
            ConfigurationLoader(environ={}).validate(["not", "a", "mapping"])

    def test_missing_sections_warn(self) -> None:
        """Each missing section is reported once."""
        warnings = WarningCollector()
        ConfigurationLoader(warnings, environ={}).validate({"templating": {}})
        missing = [w.source for w in warnings if w.code == "missing_section"]
        assert missing == ["build_config", "client_data", "runtime_variables"]

    def test_missing_business_info_warns(self) -> None:
        """Missing business_info is reported but not fatal."""
        warnings = WarningCollector()
        ConfigurationLoader(warnings, environ={}).validate({"client_data": {}})
        assert "client_data.business_info" in [w.source for w in warnings]

    def test_wrong_type_names_section_and_field(self) -> None:
        """Type errors name the section and field."""
        document = {"build_config": {"voice_settings": {"max_call_duration_ms": "long"}}}
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(environ={}).validate(document)
        assert exc_info.value.section == "build_config"
        assert exc_info.value.field_path == "voice_settings.max_call_duration_ms"

    def test_unknown_property_type(self) -> None:
        """An unknown property type is a configuration error."""
        document = {
            "client_data": {
                "services": [
                    {
                        "name": "Oil",
                        "slug": "oil",
                        "properties": {"required": [{"name": "make", "type": "text"}]},
                    }
                ]
            }
        }
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(environ={}).validate(document)
        assert exc_info.value.section == "client_data"
        assert exc_info.value.field_path == "services[0].properties.required[0].type"

    @pytest.mark.parametrize(
        ("section", "path", "value"),
        [
            ("client_data", ("services", 0, "slug"), "oilChange"),
            ("client_data", ("services", 0, "slug"), "Oil Change"),
            ("templating", ("version",), "1.2"),
            ("client_data", ("services", 0, "properties", "required", 0, "name"), "vehicle-make"),
        ],
    )
    def test_well_formed_values_accepted(
        self,
        sample_document: dict[str, Any],
        section: str,
        path: tuple[str | int, ...],
        value: str,
    ) -> None:
        """Only types, counts and uniqueness are checked, not naming styles."""
        target: Any = sample_document[section]
        for key in path[:-1]:
            target = target[key]
        target[path[-1]] = value

        config = ConfigurationLoader(environ={}).validate(sample_document)

        assert json.dumps(value) in getattr(config, section).model_dump_json()

    def test_extra_property_keys_accepted(self, sample_document: dict[str, Any]) -> None:
        """Property records may carry descriptive keys."""
        service = sample_document["client_data"]["services"][0]
        service["properties"]["required"][0]["description"] = "Manufacturer"

        config = ConfigurationLoader(environ={}).validate(sample_document)

        prop = config.client_data.services[0].properties.required[0]
        assert prop.model_extra == {"description": "Manufacturer"}

    def test_duplicate_slug_message(self) -> None:
        """Validator messages lose pydantic's prefix."""
        document = {
            "client_data": {
                "services": [{"name": "A", "slug": "a"}, {"name": "B", "slug": "a"}]
            }
        }
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(environ={}).validate(document)
        assert str(exc_info.value).startswith("Duplicate service slug 'a'")


class TestDefaultDocument:
    """Tests for default_document()."""

    def test_returns_copy(self) -> None:
        """Callers cannot mutate the built-in default."""
        first = default_document()
        first["client_data"]["services"].append({"name": "x"})
        assert default_document()["client_data"]["services"] == []

    def test_validates_without_warnings(self) -> None:
        """The default document is complete."""
        warnings = WarningCollector()
        ConfigurationLoader(warnings, environ={}).validate(default_document())
        assert len(warnings) == 0
