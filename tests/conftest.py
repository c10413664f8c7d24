"""Common test fixtures and configuration for agents_context tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from agents_context.llm.base import (
    BaseLLMProvider,
    LLMConfig,
    LLMResponse,
    Message,
    MessageRole,
    RetryConfig,
    ToolCall,
    ToolDefinition,
)


# ============================================================================
# Message Fixtures
# ============================================================================


def plain_history(count: int, start: int = 0) -> List[Message]:
    """Alternating user/assistant messages without tool calls."""
    messages = []
    for i in range(start, start + count):
        if i % 2 == 0:
            messages.append(Message(role=MessageRole.USER, content=f"Question {i}"))
        else:
            messages.append(Message(role=MessageRole.ASSISTANT, content=f"Answer {i}"))
    return messages


@pytest.fixture
def make_history() -> Callable[..., List[Message]]:
    """Factory for plain user/assistant histories."""
    return plain_history


@pytest.fixture
def sample_messages() -> List[Message]:
    """Create sample messages for testing."""
    return [
        Message(role=MessageRole.USER, content="What is superposition?"),
        Message(role=MessageRole.ASSISTANT, content="A quantum state can be a blend of basis states."),
        Message(role=MessageRole.USER, content="And entanglement?"),
        Message(role=MessageRole.ASSISTANT, content="Correlated states that cannot be factored."),
    ]


@pytest.fixture
def tool_history() -> List[Message]:
    """History with one tool call and its result in the middle."""
    return [
        Message(role=MessageRole.USER, content="q1"),
        Message(role=MessageRole.ASSISTANT, content="a1"),
        Message(role=MessageRole.USER, content="q2"),
        Message(
            role=MessageRole.ASSISTANT,
            content="",
            tool_calls=[
                ToolCall(id="call_1", name="quantumResearch", arguments={"topic": "superposition"})
            ],
        ),
        Message(
            role=MessageRole.TOOL,
            content="Superposition explained",
            name="quantumResearch",
            tool_call_id="call_1",
        ),
        Message(role=MessageRole.ASSISTANT, content="answer2"),
        Message(role=MessageRole.USER, content="q3"),
    ]


@pytest.fixture
def research_tool() -> ToolDefinition:
    """Topic lookup tool definition."""
    return ToolDefinition(
        name="quantumResearch",
        description="Look up an explanation of a quantum computing topic",
        parameters={
            "type": "object",
            "properties": {
                "topic": {"type": "string", "description": "Topic to research"},
            },
            "required": ["topic"],
        },
    )


# ============================================================================
# Model Client Fixtures
# ============================================================================


class MockModelClient:
    """Scriptable model client recording every call."""

    def __init__(
        self,
        summary: Optional[str] = None,
        summary_error: Optional[Exception] = None,
        complete_error: Optional[Exception] = None,
    ):
        self.summary = summary
        self.summary_error = summary_error
        self.complete_error = complete_error
        self.summarize_calls: List[List[Message]] = []
        self.complete_calls: List[List[Message]] = []

    async def complete(self, messages: List[Message]) -> Message:
        self.complete_calls.append(list(messages))
        if self.complete_error is not None:
            raise self.complete_error
        return Message(
            role=MessageRole.ASSISTANT,
            content=f"Response {len(self.complete_calls)}",
        )

    async def summarize(self, messages: List[Message]) -> str:
        self.summarize_calls.append(list(messages))
        if self.summary_error is not None:
            raise self.summary_error
        if self.summary is not None:
            return self.summary
        return f"Summary {len(self.summarize_calls)}: we discussed {len(messages)} messages."


@pytest.fixture
def mock_model_client() -> MockModelClient:
    """Model client that always succeeds."""
    return MockModelClient()


@pytest.fixture
def failing_model_client() -> MockModelClient:
    """Model client whose summaries always fail."""
    return MockModelClient(summary_error=RuntimeError("model unavailable"))


# ============================================================================
# LLM Provider Fixtures
# ============================================================================


class MockLLMProvider(BaseLLMProvider):
    """Provider returning scripted responses in order."""

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        responses: Optional[List[LLMResponse]] = None,
        tools_supported: bool = True,
    ):
        super().__init__(config or LLMConfig(model="mock-model"))
        self.responses = list(responses or [])
        self.tools_supported = tools_supported
        self.calls: List[Dict[str, Any]] = []

    async def generate(
        self,
        messages: List[Message],
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        self.calls.append({"messages": list(messages), "tools": tools, "kwargs": kwargs})
        if self.responses:
            return self.responses.pop(0)
        return LLMResponse(content="Mock response", model=self.config.model)

    def supports_tools(self) -> bool:
        return self.tools_supported


@pytest.fixture
def sample_llm_config() -> LLMConfig:
    """Create sample LLM configuration."""
    return LLMConfig(
        model="test-model",
        api_key="test-api-key",
        temperature=0.7,
        max_tokens=1000,
        timeout=30.0,
        retry_config=RetryConfig(max_retries=2, base_delay=0.0, jitter=False),
    )


@pytest.fixture
def mock_provider() -> MockLLMProvider:
    """Provider with no scripted responses."""
    return MockLLMProvider()


@pytest.fixture
def provider_factory() -> Callable[..., MockLLMProvider]:
    """Factory for providers with scripted responses."""
    return MockLLMProvider


@pytest.fixture
def client_factory() -> Callable[..., MockModelClient]:
    """Factory for scriptable model clients."""
    return MockModelClient
