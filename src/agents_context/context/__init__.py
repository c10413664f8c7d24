"""Context window management.

This module keeps a conversation within a size budget:
- Size estimation (message count, ~4 characters per token)
- Triggers combined with OR semantics (tokens, messages, fraction)
- Retention boundaries that never split a tool call from its result
- Summarization of the dropped prefix through the model client
- The context window manager orchestrating a turn
- An invocation observer reporting metrics and new summaries

Example:
    from agents_context.context import (
        CompactionConfig,
        ContextWindowManager,
        ConversationSummarizer,
    )

    config = CompactionConfig(
        triggers=[{"tokens": 1000}, {"messages": 8}],
        retention={"messages": 6},
    )
    manager = ContextWindowManager(config, ConversationSummarizer(client))

    prep = await manager.prepare_turn(history, user_message)
    if prep.compaction_occurred:
        print(prep.summary_text)
"""

from .boundary import find_retention_start, split_for_compaction
from .config import (
    RESEARCH_ASSISTANT_CONFIG,
    CompactionConfig,
    RetentionPolicy,
    parse_retention,
)
from .estimator import (
    DEFAULT_CHARS_PER_TOKEN,
    CharacterEstimateCounter,
    SizeEstimate,
    estimate_size,
)
from .manager import (
    CompactionState,
    ContextWindowManager,
    SkipReason,
    SummaryRecord,
    TurnPreparation,
    hash_messages,
)
from .observer import InvocationObserver, TurnObservation, looks_like_summary
from .summarizer import (
    DEFAULT_PROMPTS,
    SUMMARY_PREFIX,
    ConversationSummarizer,
    SummaryPrompt,
    build_summary_message,
    format_conversation,
)
from .triggers import Trigger, TriggerEvaluator, TriggerType, parse_triggers

__all__ = [
    # Estimation
    "CharacterEstimateCounter",
    "DEFAULT_CHARS_PER_TOKEN",
    "SizeEstimate",
    "estimate_size",
    # Triggers and configuration
    "CompactionConfig",
    "RESEARCH_ASSISTANT_CONFIG",
    "RetentionPolicy",
    "Trigger",
    "TriggerEvaluator",
    "TriggerType",
    "parse_retention",
    "parse_triggers",
    # Boundary
    "find_retention_start",
    "split_for_compaction",
    # Summarization
    "ConversationSummarizer",
    "DEFAULT_PROMPTS",
    "SUMMARY_PREFIX",
    "SummaryPrompt",
    "build_summary_message",
    "format_conversation",
    # Manager
    "CompactionState",
    "ContextWindowManager",
    "SkipReason",
    "SummaryRecord",
    "TurnPreparation",
    "hash_messages",
    # Observer
    "InvocationObserver",
    "TurnObservation",
    "looks_like_summary",
]
