"""CLI command modules.

This package contains the implementation of all CLI subcommands.
Commands are loaded lazily by switchboard_cli.main.
"""

from __future__ import annotations

__all__: list[str] = []
