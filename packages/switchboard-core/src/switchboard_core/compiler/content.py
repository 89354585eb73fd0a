"""Content strategy for switchboard.

Prompt files and generic content files are plain text with different
substitution policies:
- Prompt files resolve only generated variables; every other
  placeholder is preserved for the runtime to resolve per conversation.
- Other content files resolve every Phase 1 and Phase 4 placeholder.
  A placeholder that matches no variable is left in place and reported.
"""

from __future__ import annotations

import structlog

from switchboard_core.compiler.models import ResolvedPrompts, SourceFile, SubstitutionPolicy
from switchboard_core.compiler.registry import CompileContext
from switchboard_core.compiler.substitution import find_placeholders, substitute
from switchboard_core.errors import ArtifactParseError

logger = structlog.get_logger(__name__)

# Generated content variables resolved inside prompt files
GENERATED_PROMPT_VARIABLES: tuple[str, ...] = ("SERVICE_PROPERTIES_GUIDE",)

CORE_PROMPT_SUFFIX = "Core Prompt.md"
RAG_PROMPT_SUFFIX = "Answer Question - RAG Agent Prompt.md"


def _decode(source: SourceFile) -> str:
    try:
        return source.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ArtifactParseError(source.relative_path, "not valid UTF-8 text") from e


def compile_prompt(source: SourceFile, context: CompileContext) -> bytes:
    """Resolve generated variables only; runtime placeholders survive."""
    text = _decode(source)
    generated = {
        name: context.phases.content[name]
        for name in GENERATED_PROMPT_VARIABLES
        if name in context.phases.content
    }
    resolved = substitute(text, generated)
    logger.info(
        "prompt_compiled",
        source=source.relative_path,
        preserved=len(find_placeholders(resolved)),
    )
    return resolved.encode("utf-8")


def compile_content(source: SourceFile, context: CompileContext) -> bytes:
    """Resolve every Phase 1 and Phase 4 placeholder."""
    text = _decode(source)
    resolved = substitute(text, context.phases.full_content())

    unresolved = find_placeholders(resolved)
    if unresolved:
        context.warnings.warn(
            "unresolved_placeholder",
            f"Unknown placeholder(s) left in {source.relative_path}: "
            + ", ".join(f"{{{{{name}}}}}" for name in unresolved),
            source=source.relative_path,
        )
    logger.info("content_compiled", source=source.relative_path)
    return resolved.encode("utf-8")


def compile_text(source: SourceFile, policy: SubstitutionPolicy, context: CompileContext) -> bytes:
    """Dispatch on substitution policy."""
    if policy is SubstitutionPolicy.GENERATED_ONLY:
        return compile_prompt(source, context)
    return compile_content(source, context)


def collect_prompts(compiled: list[tuple[str, bytes]], context: CompileContext) -> ResolvedPrompts:
    """Pick the core and secondary prompts out of the first pass.

    Args:
        compiled: (output path, compiled bytes) of prompt artifacts, in
            build order.
        context: Build context (for duplicate warnings).

    Returns:
        The prompt texts as written. A blank prompt counts as missing.
    """
    core: str | None = None
    rag: str | None = None
    for output_path, content in compiled:
        text = content.decode("utf-8")
        if output_path.endswith(RAG_PROMPT_SUFFIX):
            if rag is not None:
                context.warnings.warn(
                    "duplicate_prompt",
                    f"Ignoring additional answer question prompt {output_path}",
                    source=output_path,
                )
                continue
            rag = text
        elif output_path.endswith(CORE_PROMPT_SUFFIX):
            if core is not None:
                context.warnings.warn(
                    "duplicate_prompt",
                    f"Ignoring additional core prompt {output_path}",
                    source=output_path,
                )
                continue
            core = text

    logger.debug(
        "prompts_resolved",
        core_chars=len(core) if core else 0,
        rag_chars=len(rag) if rag else 0,
    )
    return ResolvedPrompts(
        core=core if core and core.strip() else None,
        rag=rag if rag and rag.strip() else None,
    )
