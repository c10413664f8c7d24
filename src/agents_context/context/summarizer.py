"""Conversation summarization for compaction.

This module provides:
- SummaryPrompt: prompt configuration for summary generation
- format_conversation: renders a message range (tool calls included) as text
- ConversationSummarizer: delegates to a model client and validates the result
- build_summary_message: wraps summary text as a synthetic summary message
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

from pydantic import BaseModel, Field

from agents_context.context.estimator import (
    get_content,
    get_issued_call_ids,
    get_role,
    get_tool_call_id,
)
from agents_context.errors import SummarizationFailed
from agents_context.llm.base import Message, MessageRole
from agents_context.observability.logging import get_logger

if TYPE_CHECKING:
    from agents_context.llm.client import ModelClient

logger = get_logger(__name__)

SUMMARY_PREFIX = "Here is a summary of the conversation to date:"


class SummaryPrompt(BaseModel):
    """Configuration for summary generation prompts."""

    system_prompt: str = Field(
        default=(
            "You are a conversation summarizer. Condense earlier parts of a "
            "conversation so an assistant can continue it without the original "
            "messages."
        ),
        description="System prompt for summarization",
    )
    user_prompt_template: str = Field(
        default=(
            "Summarize the conversation below. Cover:\n"
            "- Topics covered\n"
            "- Key facts established, including tool results\n"
            "- Open threads and unanswered questions\n\n"
            "Conversation:\n{conversation}\n\n"
            "Summary:"
        ),
        description="Template for user prompt with a {conversation} placeholder",
    )

    def render(self, conversation: str) -> str:
        """Fill the user template."""
        return self.user_prompt_template.format(conversation=conversation)


DEFAULT_PROMPTS: Dict[str, SummaryPrompt] = {
    "general": SummaryPrompt(),
    "research": SummaryPrompt(
        system_prompt=(
            "You summarize research conversations. Keep the concepts explained, "
            "definitions, formulas and sources looked up, and what the researcher "
            "still wants to know."
        ),
        user_prompt_template=(
            "Summarize this research session as a compact topic list:\n"
            "- Each question asked and the gist of its answer\n"
            "- Facts retrieved by tools\n"
            "- Follow-ups the researcher mentioned\n\n"
            "Conversation:\n{conversation}\n\n"
            "Summary:"
        ),
    ),
    "brief": SummaryPrompt(
        system_prompt="You are a concise summarizer. Create very brief summaries.",
        user_prompt_template=(
            "Provide a very brief summary (2-3 sentences) of this conversation:\n\n"
            "{conversation}\n\n"
            "Brief summary:"
        ),
    ),
}


def _format_tool_calls(message: Any) -> List[str]:
    if isinstance(message, dict):
        tool_calls = message.get("tool_calls") or []
    else:
        tool_calls = getattr(message, "tool_calls", None) or []

    parts = []
    for tc in tool_calls:
        if isinstance(tc, dict):
            name, arguments, call_id = tc.get("name", "?"), tc.get("arguments", {}), tc.get("id")
        else:
            name, arguments, call_id = tc.name, tc.arguments, tc.id
        args = json.dumps(arguments, sort_keys=True, default=str)
        parts.append(f"[called {name}({args}) id={call_id}]")
    return parts


def format_conversation(messages: Sequence[Any]) -> str:
    """Format messages into conversation text.

    Args:
        messages: List of messages.

    Returns:
        One block per message, ``ROLE: content``.
    """
    parts = []
    for msg in messages:
        role = get_role(msg) or "unknown"
        content = get_content(msg)
        text = content if isinstance(content, str) else ""

        label = role.upper()
        call_id = get_tool_call_id(msg)
        if call_id:
            label = f"{label} (result of {call_id})"

        pieces = [text.strip()] if text.strip() else []
        if get_issued_call_ids(msg):
            pieces.extend(_format_tool_calls(msg))

        if pieces:
            parts.append(f"{label}: {' '.join(pieces)}")

    return "\n\n".join(parts)


def build_summary_message(summary_text: str) -> Message:
    """Wrap summary text as the synthetic first message of a compacted history."""
    return Message(
        role=MessageRole.SUMMARY,
        content=f"{SUMMARY_PREFIX}\n\n{summary_text.strip()}",
    )


class ConversationSummarizer:
    """Summarizes a droppable prefix through a model client.

    Any failure, or an empty result, raises :class:`SummarizationFailed`;
    the caller decides how to recover.
    """

    def __init__(self, model_client: ModelClient):
        """Initialize conversation summarizer.

        Args:
            model_client: Client providing ``summarize(messages) -> str``.
        """
        self._client = model_client

    async def summarize(self, messages: Sequence[Any]) -> str:
        """Summarize the given messages.

        Args:
            messages: The messages being replaced.

        Returns:
            Non-empty summary text.

        Raises:
            SummarizationFailed: If the client errors or returns no text.
        """
        if not messages:
            raise SummarizationFailed("Nothing to summarize", message_count=0)

        try:
            summary = await self._client.summarize(list(messages))
        except Exception as e:
            logger.warning(
                "Summary generation failed",
                message_count=len(messages),
                error=str(e),
            )
            raise SummarizationFailed(
                f"Model client failed to summarize: {e}",
                message_count=len(messages),
                cause=e,
            ) from e

        if not isinstance(summary, str) or not summary.strip():
            raise SummarizationFailed(
                "Model client returned an empty summary",
                message_count=len(messages),
            )

        return summary.strip()
