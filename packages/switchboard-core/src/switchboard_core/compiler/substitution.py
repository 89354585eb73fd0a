"""Flat {{name}} placeholder substitution.

Placeholders are flat keys only; there are no loops, conditionals or
expressions. Substitution is a single pass, so a substituted value is
never itself re-scanned for placeholders.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z_][A-Za-z0-9_]*)\}\}")


def substitute(text: str, variables: Mapping[str, str]) -> str:
    """Replace known placeholders; unknown placeholders are left intact.

    Example:
        >>> substitute("Hi {{name}}, {{unknown}}", {"name": "Ada"})
        'Hi Ada, {{unknown}}'
    """

    def _replace(match: re.Match[str]) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else value

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def find_placeholders(text: str) -> list[str]:
    """Placeholder names in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(text)))


def substitute_leaves(value: Any, variables: Mapping[str, str]) -> Any:
    """Substitute placeholders in every string leaf of a JSON structure.

    Object keys are left untouched. Returns a new structure.
    """
    if isinstance(value, str):
        return substitute(value, variables)
    if isinstance(value, list):
        return [substitute_leaves(item, variables) for item in value]
    if isinstance(value, dict):
        return {key: substitute_leaves(item, variables) for key, item in value.items()}
    return value


def substitute_path(path: str, variables: Mapping[str, str]) -> str:
    """Substitute placeholders in each segment of a POSIX path.

    Path separators inside substituted values are replaced with "-" so a
    value can never change the directory layout.
    """
    safe = {key: value.replace("/", "-").replace("\\", "-") for key, value in variables.items()}
    return "/".join(substitute(segment, safe) for segment in path.split("/"))
