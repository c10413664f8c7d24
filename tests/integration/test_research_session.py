"""End-to-end research session with tool calls and compaction."""

from __future__ import annotations

from typing import Any, List, Optional

import pytest

from agents_context import (
    ConversationRunner,
    HookRegistry,
    HookType,
    LLMResponse,
    Message,
    MessageRole,
    ProviderModelClient,
    ToolCall,
    ToolDefinition,
)
from agents_context.context.config import RESEARCH_ASSISTANT_CONFIG
from agents_context.context.estimator import get_issued_call_ids
from agents_context.context.summarizer import DEFAULT_PROMPTS
from agents_context.llm.base import BaseLLMProvider, LLMConfig

pytestmark = pytest.mark.asyncio

TOPICS = ["superposition", "entanglement", "decoherence", "qubits", "quantum gates", "error correction"]


class ResearchProvider(BaseLLMProvider):
    """Looks up each question's topic once, then answers."""

    def __init__(self):
        super().__init__(LLMConfig(model="research-model"))
        self.summary_requests = 0
        self._calls = 0

    def supports_tools(self) -> bool:
        return True

    async def generate(
        self,
        messages: List[Message],
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        if messages and messages[0].role == MessageRole.SYSTEM:
            self.summary_requests += 1
            return LLMResponse(
                content=f"Topics covered so far (summary {self.summary_requests}).",
                model=self.config.model,
            )

        last = messages[-1]
        if last.role == MessageRole.USER:
            self._calls += 1
            topic = last.content.split(":", 1)[1].strip()
            call = ToolCall(id=f"call_{self._calls}", name="quantumResearch", arguments={"topic": topic})
            return LLMResponse(content="", model=self.config.model, tool_calls=[call])

        return LLMResponse(content=f"Here is what I found: {last.content}", model=self.config.model)


class KnowledgeBase:
    async def execute(self, topic: str) -> str:
        return f"{topic} is a core quantum computing concept."


def assert_tool_pairs_intact(history: List[Message]) -> None:
    issued = set()
    for msg in history:
        if msg.tool_call_id:
            assert msg.tool_call_id in issued
        issued.update(get_issued_call_ids(msg))


async def test_research_session(research_tool):
    provider = ResearchProvider()
    client = ProviderModelClient(
        provider,
        tools=[research_tool],
        tool_executors={"quantumResearch": KnowledgeBase()},
        summary_prompt=DEFAULT_PROMPTS["research"],
    )
    compactions = []
    hooks = HookRegistry()
    hooks.register(HookType.ON_COMPACTION, lambda context, **kw: compactions.append(kw["summary_text"]))
    runner = ConversationRunner(client, RESEARCH_ASSISTANT_CONFIG, hooks=hooks)
    session = runner.new_session(session_id="research")

    results = []
    for topic in TOPICS:
        result = await runner.run_turn(session, f"Explain this topic: {topic}")
        results.append(result)
        assert_tool_pairs_intact(session.history)
        assert result.response.content.startswith("Here is what I found")

    assert not results[0].compaction_occurred
    assert any(r.compaction_occurred for r in results)
    assert len(compactions) == provider.summary_requests
    assert session.history[0].role == MessageRole.SUMMARY
    assert session.last_summary.summary_text == compactions[-1]

    reported = [r.observation.summary_text for r in results if r.observation.summary_text]
    assert reported == compactions
    assert all(r.observation.message_count < 12 for r in results)
