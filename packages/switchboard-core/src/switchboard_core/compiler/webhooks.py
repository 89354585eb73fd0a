"""Endpoint identifier generation for switchboard.

Every external callback (tool) gets a short identifier derived from a
digest of "<business name>-<tool name>". The identifier has no random or
clock input, so identical names always yield identical URLs.

URL shape: {base_url}/webhook/{endpoint_base}-{hash}
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

import structlog

from switchboard_core.errors import ConfigurationError
from switchboard_core.schemas import WebhookDeployment

logger = structlog.get_logger(__name__)

WEBHOOK_PATH_SEGMENT = "/webhook/"


def endpoint_hash(
    business_name: str,
    tool_name: str,
    *,
    algorithm: str = "sha256",
    length: int = 8,
) -> str:
    """Deterministic hex digest of "<business>-<tool>", truncated.

    Example:
        >>> endpoint_hash("Acme Auto", "bookAppointment")
        'd08a69e1'
    """
    digest = hashlib.new(algorithm, f"{business_name}-{tool_name}".encode())
    return digest.hexdigest()[:length]


def build_url(base_url: str, endpoint_base: str, hash_value: str) -> str:
    """Assemble a callback URL from its parts."""
    return f"{base_url.rstrip('/')}{WEBHOOK_PATH_SEGMENT}{endpoint_base}-{hash_value}"


@dataclass(frozen=True)
class EndpointIdentifier:
    """Resolved identifier of one external callback.

    Attributes:
        tool_name: Logical tool name (e.g. "bookAppointment").
        endpoint_base: Path prefix of the endpoint.
        hash: Truncated digest.
        url: Full callback URL.
        description: Free-text description from configuration.
    """

    tool_name: str
    endpoint_base: str
    hash: str
    url: str
    description: str = ""

    @property
    def path(self) -> str:
        """Webhook trigger path (everything after /webhook/)."""
        return f"{self.endpoint_base}-{self.hash}"

    def to_dict(self) -> dict[str, str]:
        """Listing entry for deployment tooling."""
        return {
            "tool": self.tool_name,
            "endpoint_base": self.endpoint_base,
            "hash": self.hash,
            "url": self.url,
        }


class IdentifierGenerator:
    """Produces endpoint identifiers for the configured tools.

    Args:
        business_name: Business name mixed into every digest.
        deployment: Hash settings and the tool table.
        base_url: Base URL of the workflow runtime.

    Example:
        >>> generator = IdentifierGenerator("Acme Auto", deployment, "https://n8n.example.com")
        >>> generator.get("bookAppointment").url
        'https://n8n.example.com/webhook/bookappointment-d08a69e1'
    """

    def __init__(
        self,
        business_name: str,
        deployment: WebhookDeployment,
        base_url: str,
    ) -> None:
        self.business_name = business_name
        self.deployment = deployment
        self.base_url = base_url
        self._identifiers = self._generate()

    def hash(self, tool_name: str) -> str:
        """Digest for a tool under this business."""
        return endpoint_hash(
            self.business_name,
            tool_name,
            algorithm=self.deployment.hash_algorithm,
            length=self.deployment.hash_length,
        )

    def _generate(self) -> dict[str, EndpointIdentifier]:
        identifiers: dict[str, EndpointIdentifier] = {}
        seen: dict[str, str] = {}
        for tool_name, tool in self.deployment.tools.items():
            endpoint_base = tool.endpoint_base or tool_name.lower()
            hash_value = self.hash(tool_name)
            identifier = EndpointIdentifier(
                tool_name=tool_name,
                endpoint_base=endpoint_base,
                hash=hash_value,
                url=build_url(self.base_url, endpoint_base, hash_value),
                description=tool.description,
            )
            if identifier.path in seen:
                raise ConfigurationError(
                    f"Tools '{seen[identifier.path]}' and '{tool_name}' resolve to the "
                    f"same endpoint path '{identifier.path}'; increase hash_length or "
                    "use distinct endpoint_base values",
                    section="build_config",
                    field_path="webhook_deployment.tools",
                )
            seen[identifier.path] = tool_name
            identifiers[tool_name] = identifier

        logger.debug("endpoints_generated", count=len(identifiers))
        return identifiers

    def get(self, tool_name: str) -> EndpointIdentifier | None:
        """Identifier of a configured tool, or None."""
        return self._identifiers.get(tool_name)

    @property
    def identifiers(self) -> dict[str, EndpointIdentifier]:
        """All identifiers keyed by tool name, in configuration order."""
        return dict(self._identifiers)
