"""JSON document parsing and serialization for the JSON strategies."""

from __future__ import annotations

import json
from typing import Any

from switchboard_core.compiler.models import SourceFile
from switchboard_core.errors import ArtifactParseError


def load_document(source: SourceFile) -> dict[str, Any]:
    """Parse a source file as a JSON object.

    Raises:
        ArtifactParseError: If the bytes are not UTF-8 JSON or the top
            level is not an object.
    """
    try:
        document = json.loads(source.content.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ArtifactParseError(source.relative_path, "not valid UTF-8") from e
    except json.JSONDecodeError as e:
        raise ArtifactParseError(
            source.relative_path,
            f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
        ) from e

    if not isinstance(document, dict):
        raise ArtifactParseError(
            source.relative_path,
            f"top level is {type(document).__name__}, expected a JSON object",
        )
    return document


def dump_document(document: dict[str, Any]) -> bytes:
    """Serialize a document: two-space indent, UTF-8, trailing newline."""
    return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")
