"""Custom exception hierarchy for switchboard-core.

This module defines the exception classes used throughout switchboard:
- SwitchboardError: Base exception for all switchboard errors
- ConfigurationError: Malformed configuration document (fatal)
- ConstraintViolation: Service/property count bounds exceeded (fatal)
- ArtifactParseError: A JSON-bearing artifact failed to parse (recovered)
- ReferenceResolutionError: An env reference or injection target is missing
  (recovered)

Fatal errors abort the build before any artifact is written. Recovered
errors are caught by the compiler, logged, and recorded as build warnings.

User-facing messages are safe to display; technical details are logged
internally via structlog.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class SwitchboardError(Exception):
    """Base exception for switchboard.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. Logged
            internally but never part of the user message.

    Example:
        >>> raise SwitchboardError(
        ...     "Build failed",
        ...     internal_details="dist/ not writable: EACCES",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "switchboard_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(SwitchboardError):
    """Raised when the configuration document is malformed.

    Aborts the entire build before any artifact is written.

    Attributes:
        section: Top-level section containing the problem (e.g. "client_data").
        field_path: Dot-separated path to the invalid field, if known.

    Example:
        >>> raise ConfigurationError(
        ...     "Duplicate service slug 'consult'",
        ...     section="client_data",
        ...     field_path="services[2].slug",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        section: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        context_parts: list[str] = []
        if section:
            context_parts.append(f"section '{section}'")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.section = section
        self.field_path = field_path


class ConstraintViolation(SwitchboardError):
    """Raised when the service list exceeds a structural bound.

    Validation runs before any schema is generated, so no partial schema
    is ever emitted.

    Attributes:
        constraint: Name of the violated bound (e.g. "max_services").
        limit: Configured maximum.
        actual: Observed count.
        service_name: Offending service, when the bound is per-service.

    Example:
        >>> raise ConstraintViolation(
        ...     constraint="max_services",
        ...     limit=8,
        ...     actual=9,
        ... )
        # User sees: "Service count (9) exceeds maximum allowed (8)"
    """

    def __init__(
        self,
        *,
        constraint: str,
        limit: int,
        actual: int,
        service_name: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        if constraint == "max_services":
            user_message = f"Service count ({actual}) exceeds maximum allowed ({limit})"
        elif constraint == "max_total_dynamic_columns":
            user_message = (
                f"Total dynamic columns ({actual}) exceeds maximum allowed ({limit})"
            )
        else:
            kind = "required" if "required" in constraint else "optional"
            user_message = (
                f'Service "{service_name}" has {actual} {kind} properties, '
                f"exceeds maximum of {limit}"
            )

        super().__init__(user_message, internal_details=internal_details)

        self.constraint = constraint
        self.limit = limit
        self.actual = actual
        self.service_name = service_name


class ArtifactParseError(SwitchboardError):
    """Raised when an artifact cannot be parsed by its strategy.

    Covers invalid JSON in JSON-bearing artifacts and content that is not
    UTF-8 text. Recovered: the compiler writes the original bytes unchanged.

    Attributes:
        source_path: Source path of the artifact.
    """

    def __init__(
        self,
        source_path: str,
        reason: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"Could not parse {source_path}: {reason}",
            internal_details=internal_details,
        )
        self.source_path = source_path
        self.reason = reason


class ReferenceResolutionError(SwitchboardError):
    """Raised when a named reference cannot be resolved.

    Covers "env:NAME" indirections with no matching environment variable
    and injection targets (nodes, tools) missing from an artifact.
    Recovered: the referencing value or structure is left unmodified.

    Attributes:
        reference: The name that could not be resolved.
    """

    def __init__(
        self,
        reference: str,
        user_message: str | None = None,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            user_message or f"Reference '{reference}' could not be resolved",
            internal_details=internal_details,
        )
        self.reference = reference


class InjectionTargetNotFound(ReferenceResolutionError):
    """Raised by an injector when its target node or tool is absent.

    Example:
        >>> raise InjectionTargetNotFound(
        ...     "Answer Agent",
        ...     rule="rag_prompt",
        ... )
    """

    def __init__(
        self,
        target: str,
        *,
        rule: str,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            target,
            f"Injection target '{target}' not found (rule '{rule}')",
            internal_details=internal_details,
        )
        self.rule = rule
