"""Turn lifecycle hooks.

Hooks give observability layers a defined place in the turn pipeline:
- pre_turn / post_turn: around a whole conversation turn
- on_compaction / on_compaction_skipped / on_compaction_failed: outcome of
  the context window check
- pre_model_call / post_model_call: around the model client call
- on_state_change: context window manager state transitions

Callbacks receive the :class:`HookContext` as ``context`` plus the keyword
arguments the stage fired with. They may be plain functions or coroutines.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Coroutine, Dict, List, Optional, Union

from agents_context.observability.logging import get_logger

logger = get_logger(__name__)


class HookType(str, Enum):
    """Pipeline stages a callback can attach to."""

    PRE_TURN = "pre_turn"
    POST_TURN = "post_turn"

    ON_COMPACTION = "on_compaction"
    ON_COMPACTION_SKIPPED = "on_compaction_skipped"
    ON_COMPACTION_FAILED = "on_compaction_failed"

    PRE_MODEL_CALL = "pre_model_call"
    POST_MODEL_CALL = "post_model_call"

    ON_STATE_CHANGE = "on_state_change"


@dataclass(frozen=True)
class HookContext:
    """What a callback learns about the stage that fired it.

    Attributes:
        hook_type: Stage being fired.
        session_id: Conversation session, empty when fired outside one.
        timestamp: Firing time.
        data: Stage payload (the keyword arguments minus ``session_id``).
    """

    hook_type: HookType
    session_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


HookCallback = Callable[..., Union[None, Coroutine[Any, Any, None]]]


@dataclass
class HookEntry:
    """A registered callback. Lower priority runs earlier."""

    hook_type: HookType
    callback: HookCallback
    priority: int = 0
    name: str = ""


class HookRegistry:
    """Per-stage callback lists for the turn pipeline.

    Example:
        registry = HookRegistry()

        @registry.register(HookType.ON_COMPACTION)
        async def log_summary(context, **kwargs):
            print(kwargs["summary_text"])

        await registry.fire(HookType.ON_COMPACTION, summary_text="...")
    """

    def __init__(self):
        self._entries: Dict[HookType, List[HookEntry]] = {stage: [] for stage in HookType}

    def register(
        self,
        hook_type: Union[HookType, str],
        callback: Optional[HookCallback] = None,
        priority: int = 0,
        name: Optional[str] = None,
    ) -> Union[HookEntry, Callable[[HookCallback], HookEntry]]:
        """Attach a callback to a stage.

        Works directly (``register(stage, fn)``) or as a decorator
        (``@register(stage)``). Callbacks with equal priority keep their
        registration order.

        Returns:
            The new HookEntry, or a decorator producing it.
        """
        stage = HookType(hook_type)

        def attach(fn: HookCallback) -> HookEntry:
            entry = HookEntry(stage, fn, priority, name or getattr(fn, "__name__", repr(fn)))
            entries = self._entries[stage]
            entries.append(entry)
            entries.sort(key=lambda e: e.priority)
            return entry

        if callback is None:
            return attach
        return attach(callback)

    def unregister(
        self,
        hook_type: Optional[Union[HookType, str]] = None,
        name: Optional[str] = None,
    ) -> int:
        """Detach callbacks by stage, by name, or both.

        With neither filter every callback is detached.

        Returns:
            Number of callbacks removed.
        """
        stages = [HookType(hook_type)] if hook_type is not None else list(HookType)
        removed = 0
        for stage in stages:
            kept = [e for e in self._entries[stage] if name is not None and e.name != name]
            removed += len(self._entries[stage]) - len(kept)
            self._entries[stage] = kept
        return removed

    def get_hooks(self, hook_type: Union[HookType, str]) -> List[HookEntry]:
        return list(self._entries[HookType(hook_type)])

    async def fire(self, hook_type: Union[HookType, str], **kwargs: Any) -> None:
        """Run the callbacks attached to a stage, in priority order.

        A callback that raises is logged and the remaining ones still run.
        """
        stage = HookType(hook_type)
        entries = self._entries[stage]
        if not entries:
            return

        context = HookContext(
            hook_type=stage,
            session_id=kwargs.pop("session_id", None) or "",
            data=dict(kwargs),
        )
        for entry in list(entries):
            await self._invoke(entry, context, kwargs)

    async def _invoke(self, entry: HookEntry, context: HookContext, kwargs: Dict[str, Any]) -> None:
        try:
            outcome = entry.callback(context=context, **kwargs)
            if asyncio.iscoroutine(outcome):
                await outcome
        except Exception as e:
            logger.error(
                "Hook failed",
                hook=entry.name,
                hook_type=context.hook_type.value,
                session_id=context.session_id,
                error=str(e),
            )

    def clear(self) -> None:
        for stage in HookType:
            self._entries[stage] = []
