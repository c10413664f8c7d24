"""Invocation observer.

Wraps a model invocation, records the size of the outgoing message list
and reports each new summary exactly once. When the caller passes the
manager's ``compaction_occurred`` flag that signal is used directly;
otherwise the first outgoing message is inspected for summary-like
content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

from agents_context.context.estimator import (
    DEFAULT_CHARS_PER_TOKEN,
    SizeEstimate,
    estimate_size,
    get_content,
    get_role,
)
from agents_context.llm.base import MessageRole
from agents_context.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SUMMARY_MARKERS = ("summary", "conversation to date", "discussed", "covered")


@dataclass
class TurnObservation:
    """Per-turn observable state.

    ``summary_text`` is set only on the turn a new summary is first seen.
    """

    message_count: int
    estimated_tokens: int
    compaction_occurred: bool = False
    summary_text: Optional[str] = None


def looks_like_summary(message: Any) -> bool:
    """Heuristic check for a synthetic summary message.

    True for the summary role, for content with summary phrasing, or for
    content listing several questions.
    """
    if get_role(message) == MessageRole.SUMMARY.value:
        return True
    content = get_content(message)
    if not isinstance(content, str):
        return False
    lowered = content.lower()
    if any(marker in lowered for marker in SUMMARY_MARKERS):
        return True
    return content.count("?") >= 2


class InvocationObserver:
    """Measures model invocations and reports summaries once.

    Create one per conversation session.
    """

    def __init__(self, chars_per_token: int = DEFAULT_CHARS_PER_TOKEN):
        self.chars_per_token = chars_per_token
        self.last_reported_summary: Optional[str] = None
        self.observations: List[TurnObservation] = []

    def snapshot(self, messages: Sequence[Any]) -> SizeEstimate:
        """Measure the outgoing message list."""
        return estimate_size(messages, self.chars_per_token)

    def _detect_summary(self, messages: Sequence[Any]) -> Optional[str]:
        if not messages:
            return None
        first = messages[0]
        content = get_content(first)
        if isinstance(content, str) and looks_like_summary(first):
            return content
        return None

    def _report(self, summary: Optional[str]) -> Optional[str]:
        if summary is None or summary == self.last_reported_summary:
            return None
        self.last_reported_summary = summary
        return summary

    async def observe(
        self,
        messages: Sequence[Any],
        invoke: Callable[..., Awaitable[T]],
        compaction_occurred: Optional[bool] = None,
        summary_text: Optional[str] = None,
    ) -> Tuple[T, TurnObservation]:
        """Invoke the model and record what was sent.

        Args:
            messages: Outgoing message list, passed to ``invoke``.
            invoke: Async callable performing the model call.
            compaction_occurred: Explicit compaction signal, if available.
            summary_text: Summary produced this turn, with the explicit signal.

        Returns:
            Tuple of (invoke result, observation).
        """
        before = self.snapshot(messages)
        result = await invoke(messages)

        if compaction_occurred is None:
            new_summary = self._report(self._detect_summary(messages))
            compacted = new_summary is not None
        else:
            compacted = compaction_occurred
            new_summary = self._report(summary_text) if compaction_occurred else None

        observation = TurnObservation(
            message_count=before.message_count,
            estimated_tokens=before.estimated_tokens,
            compaction_occurred=compacted,
            summary_text=new_summary,
        )
        self.observations.append(observation)

        logger.debug(
            "Model invocation observed",
            message_count=observation.message_count,
            estimated_tokens=observation.estimated_tokens,
            compaction_occurred=observation.compaction_occurred,
        )
        if new_summary is not None:
            logger.info("New conversation summary", summary_chars=len(new_summary))

        return result, observation
