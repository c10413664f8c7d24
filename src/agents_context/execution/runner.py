"""Conversation turn pipeline.

Runs each turn through a fixed two-stage pipeline: the context window
manager prepares (and possibly compacts) the history, then the invocation
observer wraps the model call. All per-session state lives on
:class:`ConversationSession`; the runner itself can serve many sessions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Union

from agents_context.context.config import CompactionConfig
from agents_context.context.manager import ContextWindowManager, SummaryRecord, TurnPreparation
from agents_context.context.observer import InvocationObserver, TurnObservation
from agents_context.context.summarizer import ConversationSummarizer
from agents_context.execution.hooks import HookRegistry, HookType
from agents_context.llm.base import Message, MessageRole
from agents_context.llm.client import ModelClient
from agents_context.observability.logging import LogContext, clear_context, get_logger, set_context

logger = get_logger(__name__)


@dataclass
class ConversationSession:
    """State of one conversation.

    Attributes:
        manager: Context window manager owned by this session.
        observer: Invocation observer owned by this session.
        session_id: Unique session identifier.
        history: Messages in chronological order.
        last_summary: Most recent summary record, if any compaction happened.
        turn_count: Completed turns.
    """

    manager: ContextWindowManager
    observer: InvocationObserver
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    history: List[Message] = field(default_factory=list)
    last_summary: Optional[SummaryRecord] = None
    turn_count: int = 0


@dataclass
class TurnResult:
    """Everything observable about one turn."""

    response: Message
    preparation: TurnPreparation
    observation: TurnObservation

    @property
    def compaction_occurred(self) -> bool:
        return self.preparation.compaction_occurred


class ConversationRunner:
    """Runs conversation turns against a model client.

    Example:
        runner = ConversationRunner(client, RESEARCH_ASSISTANT_CONFIG)
        session = runner.new_session()
        result = await runner.run_turn(session, "What is superposition?")
        print(result.observation.message_count, result.response.content)
    """

    def __init__(
        self,
        model_client: ModelClient,
        config: Optional[CompactionConfig] = None,
        summarizer: Optional[ConversationSummarizer] = None,
        hooks: Optional[HookRegistry] = None,
    ):
        """Initialize conversation runner.

        Args:
            model_client: Client used for turns and, by default, summaries.
            config: Compaction configuration.
            summarizer: Summarizer override; defaults to one over model_client.
            hooks: Hook registry fired at each pipeline stage.
        """
        self.model_client = model_client
        self.config = config or CompactionConfig()
        self.summarizer = summarizer or ConversationSummarizer(model_client)
        self.hooks = hooks or HookRegistry()

    def new_session(
        self,
        session_id: Optional[str] = None,
        history: Optional[List[Message]] = None,
    ) -> ConversationSession:
        """Create a session with its own manager and observer."""
        session_id = session_id or str(uuid.uuid4())
        return ConversationSession(
            manager=ContextWindowManager(
                self.config, self.summarizer, hooks=self.hooks, session_id=session_id
            ),
            observer=InvocationObserver(self.config.chars_per_token),
            session_id=session_id,
            history=list(history or []),
        )

    async def run_turn(
        self,
        session: ConversationSession,
        user_input: Union[str, Message],
    ) -> TurnResult:
        """Run one turn.

        Compaction problems never abort the turn; a failing model call
        propagates after the (possibly compacted) history and the user
        message have been stored on the session.

        Args:
            session: The conversation session, updated in place.
            user_input: User text or a prepared user message.

        Returns:
            TurnResult with the response, compaction outcome and metrics.
        """
        if isinstance(user_input, str):
            user_input = Message(role=MessageRole.USER, content=user_input)

        turn = session.turn_count + 1
        set_context(LogContext(session_id=session.session_id, turn=turn))
        try:
            return await self._run_turn(session, user_input, turn)
        finally:
            clear_context()

    async def _run_turn(
        self,
        session: ConversationSession,
        user_input: Message,
        turn: int,
    ) -> TurnResult:
        await self.hooks.fire(HookType.PRE_TURN, session_id=session.session_id, turn=turn)

        preparation = await session.manager.prepare_turn(session.history, user_input)
        session.history = list(preparation.history)

        if preparation.compaction_occurred:
            session.last_summary = preparation.summary_record
            await self.hooks.fire(
                HookType.ON_COMPACTION,
                session_id=session.session_id,
                preparation=preparation,
                summary_text=preparation.summary_text,
            )
        elif preparation.error is not None:
            await self.hooks.fire(
                HookType.ON_COMPACTION_FAILED,
                session_id=session.session_id,
                preparation=preparation,
                error=preparation.error,
            )
        else:
            await self.hooks.fire(
                HookType.ON_COMPACTION_SKIPPED,
                session_id=session.session_id,
                preparation=preparation,
                reason=preparation.skip_reason,
            )

        await self.hooks.fire(
            HookType.PRE_MODEL_CALL,
            session_id=session.session_id,
            message_count=len(session.history),
        )
        response, observation = await session.observer.observe(
            session.history,
            self.model_client.complete,
            compaction_occurred=preparation.compaction_occurred,
            summary_text=preparation.summary_text,
        )
        session.history.append(response)
        session.turn_count = turn

        await self.hooks.fire(
            HookType.POST_MODEL_CALL,
            session_id=session.session_id,
            response=response,
            observation=observation,
        )

        result = TurnResult(
            response=response,
            preparation=preparation,
            observation=observation,
        )
        await self.hooks.fire(HookType.POST_TURN, session_id=session.session_id, result=result)
        logger.info(
            "Turn completed",
            session_id=session.session_id,
            turn=turn,
            message_count=observation.message_count,
            estimated_tokens=observation.estimated_tokens,
            compaction_occurred=observation.compaction_occurred,
        )
        return result
