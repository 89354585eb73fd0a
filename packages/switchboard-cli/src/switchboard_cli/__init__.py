"""switchboard-cli: Command-line interface for switchboard.

Commands:
- build: Compile the source templates into deployable artifacts
- clean: Remove the output directory
- validate: Validate the configuration document
- webhooks: List resolved webhook endpoints
- schema: Export JSON Schema for IDE support
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
