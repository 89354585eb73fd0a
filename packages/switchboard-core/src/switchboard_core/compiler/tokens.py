"""Token usage estimation for compiled agents.

A rough estimate, about four characters per token after whitespace
normalization. Serialized tool definitions carry a JSON overhead factor.
"""

from __future__ import annotations

import json
import math
from typing import Any

from switchboard_core.compiler.models import TokenUsage

CHARS_PER_TOKEN = 4
JSON_OVERHEAD_MULTIPLIER = 1.15
CONVERSATION_NODE_TYPE = "conversation"


def estimate_tokens(text: str) -> int:
    """Estimate tokens in a text.

    Example:
        >>> estimate_tokens("Hello   there, caller")
        5
    """
    normalized = " ".join(text.split())
    return math.ceil(len(normalized) / CHARS_PER_TOKEN)


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class TokenEstimator:
    """Accumulates token estimates across a build.

    Example:
        >>> estimator = TokenEstimator()
        >>> estimator.count_agent(agent_document)
        >>> estimator.count_knowledge(knowledge_text)
        >>> estimator.usage().total
        2411
    """

    def __init__(self) -> None:
        self.global_prompt = 0
        self.node_instructions = 0
        self.tool_schemas = 0
        self.knowledge_bases = 0
        self.dynamic_variables = 0

    def count_agent(self, document: dict[str, Any]) -> None:
        """Count the prompt, node instructions, tools and variables of an agent."""
        flow = document.get("conversationFlow")
        if not isinstance(flow, dict):
            return

        prompt = flow.get("global_prompt")
        if isinstance(prompt, str):
            self.global_prompt += estimate_tokens(prompt)

        for node in flow.get("nodes") or []:
            if not isinstance(node, dict) or node.get("type") != CONVERSATION_NODE_TYPE:
                continue
            instruction = node.get("instruction")
            if isinstance(instruction, dict) and isinstance(instruction.get("text"), str):
                self.node_instructions += estimate_tokens(instruction["text"])

        for tool in flow.get("tools") or []:
            if isinstance(tool, dict):
                base = estimate_tokens(_compact(tool))
                self.tool_schemas += math.ceil(base * JSON_OVERHEAD_MULTIPLIER)

        variables = flow.get("default_dynamic_variables")
        if isinstance(variables, dict):
            self.dynamic_variables += estimate_tokens(_compact(variables))

    def count_knowledge(self, text: str) -> None:
        """Count a knowledge-base content file."""
        self.knowledge_bases += estimate_tokens(text)

    def usage(self) -> TokenUsage:
        """Totals so far."""
        return TokenUsage(
            global_prompt=self.global_prompt,
            node_instructions=self.node_instructions,
            tool_schemas=self.tool_schemas,
            knowledge_bases=self.knowledge_bases,
            dynamic_variables=self.dynamic_variables,
            total=(
                self.global_prompt
                + self.node_instructions
                + self.tool_schemas
                + self.knowledge_bases
                + self.dynamic_variables
            ),
        )
