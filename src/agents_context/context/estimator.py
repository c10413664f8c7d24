"""Size estimation for conversation histories.

Provides a cheap, deterministic stand-in for real tokenization: every
message with string content costs ``ceil(len(content) / 4)`` tokens.
Structured content (tool-call payloads, content blocks) costs nothing,
so the estimate undercounts tool-heavy conversations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

from agents_context.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CHARS_PER_TOKEN = 4


@dataclass(frozen=True)
class SizeEstimate:
    """Message count and estimated token total of a history."""

    message_count: int
    estimated_tokens: int

    def to_dict(self) -> dict:
        return {
            "message_count": self.message_count,
            "estimated_tokens": self.estimated_tokens,
        }


def get_role(message: Any) -> str:
    """Extract role from a message."""
    if isinstance(message, dict):
        role = message.get("role", "")
    else:
        role = getattr(message, "role", "")
    if hasattr(role, "value"):
        return role.value
    return str(role)


def get_content(message: Any) -> Any:
    """Extract raw content from a message, which may not be a string."""
    if isinstance(message, dict):
        return message.get("content")
    return getattr(message, "content", None)


def get_tool_call_id(message: Any) -> Optional[str]:
    """Return the id of the call a tool-result message answers."""
    if isinstance(message, dict):
        return message.get("tool_call_id")
    return getattr(message, "tool_call_id", None)


def get_issued_call_ids(message: Any) -> List[str]:
    """Return the ids of tool calls issued by an assistant message."""
    if isinstance(message, dict):
        tool_calls = message.get("tool_calls")
    else:
        tool_calls = getattr(message, "tool_calls", None)
    if not tool_calls:
        return []

    ids = []
    for tc in tool_calls:
        call_id = tc.get("id") if isinstance(tc, dict) else getattr(tc, "id", None)
        if call_id:
            ids.append(call_id)
    return ids


class CharacterEstimateCounter:
    """Token counter using character estimation."""

    def __init__(self, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN):
        """Initialize character estimate counter.

        Args:
            chars_per_token: Characters per token.

        Raises:
            ValueError: If chars_per_token is not positive.
        """
        if chars_per_token <= 0:
            raise ValueError(f"chars_per_token must be positive, got {chars_per_token}")
        self._chars_per_token = chars_per_token

    @property
    def chars_per_token(self) -> int:
        return self._chars_per_token

    def count(self, text: str) -> int:
        """Count tokens using character estimation.

        Args:
            text: The text to count tokens for.

        Returns:
            Estimated number of tokens, zero for empty text.
        """
        return math.ceil(len(text) / self._chars_per_token)

    def count_message(self, message: Any) -> int:
        """Estimate a single message; non-string content counts as zero."""
        content = get_content(message)
        if isinstance(content, str):
            return self.count(content)
        if not get_issued_call_ids(message):
            logger.debug(
                "Message without string content or tool calls",
                role=get_role(message),
                content_type=type(content).__name__,
            )
        return 0

    def count_messages(self, messages: Iterable[Any]) -> int:
        """Estimate the token total of a list of messages.

        Args:
            messages: List of message objects or dicts.

        Returns:
            Sum of per-message estimates.
        """
        return sum(self.count_message(msg) for msg in messages)


def estimate_size(
    messages: Sequence[Any],
    chars_per_token: int = DEFAULT_CHARS_PER_TOKEN,
) -> SizeEstimate:
    """Measure a history.

    Args:
        messages: The history to measure.
        chars_per_token: Divisor for the token estimate.

    Returns:
        SizeEstimate with the literal message count and token estimate.
    """
    counter = CharacterEstimateCounter(chars_per_token)
    return SizeEstimate(
        message_count=len(messages),
        estimated_tokens=counter.count_messages(messages),
    )
