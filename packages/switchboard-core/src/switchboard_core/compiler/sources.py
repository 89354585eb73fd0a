"""Source discovery, classification and output writing.

Source files are discovered recursively under the source directory and
classified by exact path substrings (POSIX form):
- "Retell Agent.json" anywhere in the path: agent descriptor
- under "workflows/" and ending in ".json": workflow descriptor
- under "prompts/" and ending in ".md": prompt (generated-only policy)
- anything else: content (full substitution)
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

import structlog

from switchboard_core.compiler.models import ArtifactKind, SourceFile, SubstitutionPolicy

logger = structlog.get_logger(__name__)

SKIPPED_DIRECTORIES = frozenset({"node_modules", ".git", "dist", "secrets", ".github"})
SOURCE_SUFFIXES = frozenset({".json", ".md", ".csv", ".txt"})

AGENT_DESCRIPTOR_MARKER = "Retell Agent.json"
WORKFLOW_DIRECTORY = "workflows/"
PROMPT_DIRECTORY = "prompts/"

BUILD_INFO_FILE = "build-info.json"


def classify(relative_path: str) -> tuple[ArtifactKind, SubstitutionPolicy]:
    """Select the strategy and substitution policy for a source path.

    Example:
        >>> classify("workflows/bookAppointment.json")
        (<ArtifactKind.WORKFLOW: 'workflow'>, <SubstitutionPolicy.STRUCTURAL: 'structural'>)
    """
    if AGENT_DESCRIPTOR_MARKER in relative_path:
        return ArtifactKind.AGENT, SubstitutionPolicy.STRUCTURAL
    if WORKFLOW_DIRECTORY in f"/{relative_path}" and relative_path.endswith(".json"):
        return ArtifactKind.WORKFLOW, SubstitutionPolicy.STRUCTURAL
    if PROMPT_DIRECTORY in f"/{relative_path}" and relative_path.endswith(".md"):
        return ArtifactKind.CONTENT, SubstitutionPolicy.GENERATED_ONLY
    return ArtifactKind.CONTENT, SubstitutionPolicy.FULL


def discover_sources(source_dir: Path, exclude: tuple[Path, ...] = ()) -> list[SourceFile]:
    """Read every compilable file under a directory.

    Skips tooling directories and dot-files. Files are returned sorted by
    relative path so discovery order never depends on the filesystem.

    Args:
        source_dir: Root of the source tree.
        exclude: Directories to skip (e.g. an output directory nested
            inside the source tree).
    """
    excluded = {path.resolve() for path in exclude}
    sources: list[SourceFile] = []

    for dirpath, dirnames, filenames in os.walk(source_dir):
        current = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if name not in SKIPPED_DIRECTORIES
            and not name.startswith(".")
            and (current / name).resolve() not in excluded
        )
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            path = current / filename
            if path.suffix.lower() not in SOURCE_SUFFIXES:
                continue
            relative = path.relative_to(source_dir).as_posix()
            sources.append(SourceFile(relative_path=relative, content=path.read_bytes()))

    sources.sort(key=lambda source: source.relative_path)
    logger.info("sources_discovered", source_dir=str(source_dir), count=len(sources))
    return sources


def write_output(output_dir: Path, relative_path: str, content: bytes) -> Path:
    """Write one output file, creating parent directories."""
    target = output_dir / relative_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    return target


def clean_output(output_dir: Path) -> bool:
    """Remove the output directory.

    Returns:
        True if a directory was removed.
    """
    if not output_dir.exists():
        logger.info("clean_skipped", output_dir=str(output_dir))
        return False
    shutil.rmtree(output_dir)
    logger.info("output_cleaned", output_dir=str(output_dir))
    return True
