"""Local fixtures for context module tests."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from agents_context.context import CompactionConfig, ConversationSummarizer
from agents_context.llm.base import Message, MessageRole, ToolCall


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def message_config() -> CompactionConfig:
    """Compact at 8 messages, keep 6."""
    return CompactionConfig(triggers={"messages": 8}, retention={"messages": 6})


@pytest.fixture
def research_config() -> CompactionConfig:
    """Compact at 1000 tokens or 8 messages, keep 6."""
    return CompactionConfig(
        triggers=[{"tokens": 1000}, {"messages": 8}],
        retention={"messages": 6},
    )


@pytest.fixture
def summarizer(mock_model_client) -> ConversationSummarizer:
    return ConversationSummarizer(mock_model_client)


# ============================================================================
# Message Fixtures
# ============================================================================


@pytest.fixture
def sample_dict_messages() -> List[Dict[str, Any]]:
    """Create sample messages as dictionaries."""
    return [
        {"role": "user", "content": "Hello, how are you?"},
        {"role": "assistant", "content": "I'm doing well, thank you!"},
        {"role": "user", "content": "Can you help me with a task?"},
        {"role": "assistant", "content": "Of course! What do you need help with?"},
    ]


@pytest.fixture
def chained_tool_history() -> List[Message]:
    """Two calls issued by separate assistant messages, results after both."""
    return [
        Message(role=MessageRole.USER, content="Compare two topics"),
        Message(
            role=MessageRole.ASSISTANT,
            tool_calls=[ToolCall(id="c1", name="quantumResearch", arguments={"topic": "qubits"})],
        ),
        Message(
            role=MessageRole.ASSISTANT,
            tool_calls=[ToolCall(id="c2", name="quantumResearch", arguments={"topic": "gates"})],
        ),
        Message(role=MessageRole.TOOL, content="Qubits explained", tool_call_id="c1"),
        Message(role=MessageRole.TOOL, content="Gates explained", tool_call_id="c2"),
    ]


@pytest.fixture
def parallel_tool_history() -> List[Message]:
    """One assistant message issuing two calls, followed by both results."""
    return [
        Message(role=MessageRole.USER, content="q1"),
        Message(role=MessageRole.ASSISTANT, content="a1"),
        Message(role=MessageRole.USER, content="q2"),
        Message(
            role=MessageRole.ASSISTANT,
            tool_calls=[
                ToolCall(id="c1", name="quantumResearch", arguments={"topic": "qubits"}),
                ToolCall(id="c2", name="quantumResearch", arguments={"topic": "gates"}),
            ],
        ),
        Message(role=MessageRole.TOOL, content="Qubits explained", tool_call_id="c1"),
        Message(role=MessageRole.TOOL, content="Gates explained", tool_call_id="c2"),
        Message(role=MessageRole.ASSISTANT, content="Both explained"),
        Message(role=MessageRole.USER, content="q3"),
    ]
