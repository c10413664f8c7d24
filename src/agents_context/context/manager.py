"""Context window manager.

Decides before each model call whether the accumulated history exceeds the
configured limits and, if so, rewrites it to a summary message followed by
the retained tail of recent messages.

Each call works on a copy of the history: the caller's list is never
edited, and nothing about the history is cached between calls.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from agents_context.context.boundary import split_for_compaction
from agents_context.context.config import CompactionConfig
from agents_context.context.estimator import SizeEstimate, estimate_size, get_content, get_role
from agents_context.context.summarizer import ConversationSummarizer, build_summary_message
from agents_context.context.triggers import Trigger, TriggerEvaluator, TriggerType
from agents_context.errors import SummarizationFailed
from agents_context.llm.base import Message
from agents_context.observability.logging import get_logger

if TYPE_CHECKING:
    from agents_context.execution.hooks import HookRegistry

logger = get_logger(__name__)


class CompactionState(str, Enum):
    """States of the context window manager."""

    IDLE = "idle"
    EVALUATING = "evaluating"
    COMPACTING = "compacting"
    COMPACTED = "compacted"


class SkipReason(str, Enum):
    """Why a turn went ahead without compaction."""

    NOT_TRIGGERED = "not_triggered"
    EMPTY_PREFIX = "empty_prefix"  # Retained tail covers the whole history
    NO_REDUCTION = "no_reduction"  # One message for one summary under a message ceiling
    SUMMARIZATION_FAILED = "summarization_failed"


def hash_messages(messages: Sequence[Any]) -> str:
    """Stable identity of a message range: sha256 over roles and contents."""
    digest = hashlib.sha256()
    for msg in messages:
        content = get_content(msg)
        digest.update(get_role(msg).encode())
        digest.update(b"\x00")
        digest.update(str(content if content is not None else "").encode())
        digest.update(b"\x01")
    return digest.hexdigest()[:16]


def _only_message_triggers(fired: Sequence[Trigger]) -> bool:
    # Swapping one message for one summary never lowers a message count,
    # but it can still shrink the token estimate.
    return bool(fired) and all(t.trigger_type == TriggerType.MESSAGES for t in fired)


@dataclass(frozen=True)
class SummaryRecord:
    """The latest summary and the message range it replaced."""

    summary_text: str
    replaced_range_hash: str
    replaced_message_count: int
    retained_message_count: int
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class TurnPreparation:
    """Outcome of preparing a turn.

    Attributes:
        history: History to send to the model (possibly rewritten).
        compaction_occurred: Whether older messages were summarized.
        summary_text: The new summary text, when compaction occurred.
        summary_record: Record of the new summary, when compaction occurred.
        estimate_before: Size before compaction (new message included).
        estimate_after: Size of ``history``.
        skip_reason: Why compaction did not happen, if it did not.
        error: Summarization failure, if one occurred.
        fired_triggers: Triggers satisfied by ``estimate_before``.
    """

    history: List[Message]
    compaction_occurred: bool
    estimate_before: SizeEstimate
    estimate_after: SizeEstimate
    summary_text: Optional[str] = None
    summary_record: Optional[SummaryRecord] = None
    skip_reason: Optional[SkipReason] = None
    error: Optional[SummarizationFailed] = None
    fired_triggers: List[Trigger] = field(default_factory=list)

    @property
    def messages_removed(self) -> int:
        if not self.compaction_occurred:
            return 0
        return self.estimate_before.message_count - self.estimate_after.message_count


class ContextWindowManager:
    """Keeps a conversation within its configured size budget.

    One instance per conversation session. The manager holds configuration
    and its transient state only; history is passed in and returned.

    Example:
        manager = ContextWindowManager(
            CompactionConfig(triggers={"messages": 8}, retention={"messages": 6}),
            ConversationSummarizer(model_client),
        )
        prep = await manager.prepare_turn(history, Message(MessageRole.USER, "Hi"))
        history = prep.history
    """

    def __init__(
        self,
        config: CompactionConfig,
        summarizer: ConversationSummarizer,
        hooks: Optional[HookRegistry] = None,
        session_id: str = "",
    ):
        """Initialize context window manager.

        Args:
            config: Trigger and retention configuration.
            summarizer: Summarizer for the droppable prefix.
            hooks: Optional registry notified of state transitions.
            session_id: Session identifier used in logs and hooks.
        """
        self.config = config
        self.summarizer = summarizer
        self.hooks = hooks
        self.session_id = session_id
        self.evaluator = TriggerEvaluator(
            config.triggers, model_context_limit=config.model_context_limit
        )
        self._state = CompactionState.IDLE

    @property
    def state(self) -> CompactionState:
        """Current state; IDLE between turns."""
        return self._state

    async def _transition(self, new_state: CompactionState) -> None:
        old_state = self._state
        self._state = new_state
        if self.hooks is not None:
            # Import here to avoid circular imports
            from agents_context.execution.hooks import HookType

            await self.hooks.fire(
                HookType.ON_STATE_CHANGE,
                session_id=self.session_id,
                old_state=old_state,
                new_state=new_state,
            )

    def estimate(self, messages: Sequence[Any]) -> SizeEstimate:
        """Measure a history with the configured divisor."""
        return estimate_size(messages, self.config.chars_per_token)

    async def prepare_turn(
        self,
        history: Sequence[Message],
        new_user_message: Optional[Message] = None,
    ) -> TurnPreparation:
        """Append the new message and compact the history if a trigger fires.

        Args:
            history: Current history. Not modified.
            new_user_message: Message opening this turn, if any.

        Returns:
            TurnPreparation with the history to send to the model.
        """
        messages = list(history)
        if new_user_message is not None:
            messages.append(new_user_message)

        await self._transition(CompactionState.EVALUATING)
        estimate = self.estimate(messages)
        fired = self.evaluator.fired(estimate)

        if not fired:
            logger.debug(
                "Compaction not triggered",
                session_id=self.session_id,
                **estimate.to_dict(),
            )
            await self._transition(CompactionState.IDLE)
            return TurnPreparation(
                history=messages,
                compaction_occurred=False,
                estimate_before=estimate,
                estimate_after=estimate,
                skip_reason=SkipReason.NOT_TRIGGERED,
            )

        logger.debug(
            "Compaction triggered",
            session_id=self.session_id,
            triggers=[str(t) for t in fired],
            **estimate.to_dict(),
        )
        return await self._compact(messages, estimate, fired)

    async def compact(self, history: Sequence[Message]) -> TurnPreparation:
        """Compact the history regardless of triggers.

        Args:
            history: Current history. Not modified.

        Returns:
            TurnPreparation describing the result.
        """
        messages = list(history)
        await self._transition(CompactionState.EVALUATING)
        return await self._compact(messages, self.estimate(messages), [])

    async def _compact(
        self,
        messages: List[Message],
        estimate: SizeEstimate,
        fired: List[Trigger],
    ) -> TurnPreparation:
        await self._transition(CompactionState.COMPACTING)

        keep = self.config.retention.resolve(len(messages))
        droppable, retained = split_for_compaction(messages, keep)

        skip_reason = None
        if not droppable:
            skip_reason = SkipReason.EMPTY_PREFIX
        elif len(droppable) == 1 and _only_message_triggers(fired):
            skip_reason = SkipReason.NO_REDUCTION

        if skip_reason is not None:
            logger.debug(
                "Compaction skipped",
                session_id=self.session_id,
                reason=skip_reason.value,
                droppable=len(droppable),
                keep=keep,
            )
            await self._transition(CompactionState.IDLE)
            return TurnPreparation(
                history=messages,
                compaction_occurred=False,
                estimate_before=estimate,
                estimate_after=estimate,
                skip_reason=skip_reason,
                fired_triggers=fired,
            )

        try:
            summary_text = await self.summarizer.summarize(droppable)
        except SummarizationFailed as e:
            logger.warning(
                "Compaction skipped, summarization failed",
                session_id=self.session_id,
                error=str(e),
                droppable=len(droppable),
            )
            await self._transition(CompactionState.IDLE)
            return TurnPreparation(
                history=messages,
                compaction_occurred=False,
                estimate_before=estimate,
                estimate_after=estimate,
                skip_reason=SkipReason.SUMMARIZATION_FAILED,
                error=e,
                fired_triggers=fired,
            )

        compacted = [build_summary_message(summary_text)] + retained
        record = SummaryRecord(
            summary_text=summary_text,
            replaced_range_hash=hash_messages(droppable),
            replaced_message_count=len(droppable),
            retained_message_count=len(retained),
        )
        estimate_after = self.estimate(compacted)

        await self._transition(CompactionState.COMPACTED)
        logger.info(
            "Conversation compacted",
            session_id=self.session_id,
            messages_before=estimate.message_count,
            messages_after=estimate_after.message_count,
            tokens_before=estimate.estimated_tokens,
            tokens_after=estimate_after.estimated_tokens,
        )
        await self._transition(CompactionState.IDLE)

        return TurnPreparation(
            history=compacted,
            compaction_occurred=True,
            estimate_before=estimate,
            estimate_after=estimate_after,
            summary_text=summary_text,
            summary_record=record,
            fired_triggers=fired,
        )
