"""JSON Schema export functions for switchboard.

This module exports JSON Schema Draft 2020-12 schemas from the Pydantic
models for IDE autocomplete while editing config.json and for validating
build-info.json in deployment tooling.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from switchboard_core.compiler.models import BuildReport
from switchboard_core.schemas import SwitchboardConfig

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
SCHEMA_BASE_URL = "https://switchboard.dev/schemas"


def export_config_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the configuration document JSON Schema.

    Sections tolerate unknown keys, so additionalProperties is left as
    the models declare it.

    Args:
        output_path: Optional path to write the schema file. Parent
            directories are created as needed.

    Returns:
        Dictionary containing the JSON Schema.

    Example:
        >>> schema = export_config_schema()
        >>> schema["$schema"]
        'https://json-schema.org/draft/2020-12/schema'

        >>> export_config_schema(Path("schemas/config.schema.json"))
    """
    schema = SwitchboardConfig.model_json_schema()
    schema["$schema"] = JSON_SCHEMA_DIALECT
    schema["$id"] = f"{SCHEMA_BASE_URL}/config.schema.json"

    if output_path is not None:
        _write_schema_file(schema, output_path)
    return schema


def export_build_report_schema(
    output_path: Path | str | None = None,
) -> dict[str, Any]:
    """Export the build-info.json JSON Schema.

    Example:
        >>> export_build_report_schema()["title"]
        'BuildReport'
    """
    schema = BuildReport.model_json_schema(mode="serialization")
    schema["$schema"] = JSON_SCHEMA_DIALECT
    schema["$id"] = f"{SCHEMA_BASE_URL}/build-info.schema.json"
    # build-info.json also carries the computed "totals" object
    schema["properties"]["totals"] = {"type": "object", "title": "Totals"}

    if output_path is not None:
        _write_schema_file(schema, output_path)
    return schema


def _write_schema_file(schema: dict[str, Any], path: Path | str) -> None:
    """Write schema to a JSON file, creating parent directories."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2) + "\n", encoding="utf-8")
