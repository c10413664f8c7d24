"""Turn execution: lifecycle hooks and the conversation runner."""

from .hooks import HookContext, HookEntry, HookRegistry, HookType
from .runner import ConversationRunner, ConversationSession, TurnResult

__all__ = [
    "ConversationRunner",
    "ConversationSession",
    "HookContext",
    "HookEntry",
    "HookRegistry",
    "HookType",
    "TurnResult",
]
