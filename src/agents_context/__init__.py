"""Agents Context - conversation context-window management for agents.

Keeps a multi-turn conversation within a size budget by replacing older
exchanges with a model-written summary while keeping recent messages, and
any tool call together with its result, verbatim.

Example:
    from agents_context import (
        ConversationRunner,
        CompactionConfig,
        LLMConfig,
        ProviderModelClient,
    )
    from agents_context.llm.providers import OpenAIProvider

    provider = OpenAIProvider(LLMConfig.from_env())
    runner = ConversationRunner(
        ProviderModelClient(provider),
        CompactionConfig(triggers=[{"tokens": 1000}, {"messages": 8}], retention={"messages": 6}),
    )
    session = runner.new_session()
    result = await runner.run_turn(session, "What is quantum superposition?")
"""

__version__ = "0.1.0"

from .errors import ContextWindowError, InvalidConfigurationError, SummarizationFailed
from .llm import (
    LLMConfig,
    LLMProvider,
    LLMResponse,
    Message,
    MessageRole,
    ModelClient,
    ProviderModelClient,
    ToolCall,
    ToolDefinition,
    ToolExecutor,
)
from .context import (
    CompactionConfig,
    ContextWindowManager,
    ConversationSummarizer,
    InvocationObserver,
    RetentionPolicy,
    SizeEstimate,
    SummaryRecord,
    Trigger,
    TurnObservation,
    TurnPreparation,
    estimate_size,
)
from .execution import (
    ConversationRunner,
    ConversationSession,
    HookRegistry,
    HookType,
    TurnResult,
)

__all__ = [
    "__version__",
    # Errors
    "ContextWindowError",
    "InvalidConfigurationError",
    "SummarizationFailed",
    # LLM
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "Message",
    "MessageRole",
    "ModelClient",
    "ProviderModelClient",
    "ToolCall",
    "ToolDefinition",
    "ToolExecutor",
    # Context
    "CompactionConfig",
    "ContextWindowManager",
    "ConversationSummarizer",
    "InvocationObserver",
    "RetentionPolicy",
    "SizeEstimate",
    "SummaryRecord",
    "Trigger",
    "TurnObservation",
    "TurnPreparation",
    "estimate_size",
    # Execution
    "ConversationRunner",
    "ConversationSession",
    "HookRegistry",
    "HookType",
    "TurnResult",
]
