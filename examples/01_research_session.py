#!/usr/bin/env python3
"""Example 1: Research Session - context compaction during a long conversation.

A research assistant answers a series of quantum computing questions,
looking topics up with a tool. Older exchanges are summarized once the
history reaches 1000 estimated tokens or 8 messages; the last 6 messages
are kept verbatim.

Environment (a .env file works too):
    AI_MODEL     model name
    AI_ENDPOINT  OpenAI-compatible base URL (optional)
    AI_API_KEY   API key
"""

import asyncio

from dotenv import load_dotenv

from agents_context import (
    ConversationRunner,
    HookRegistry,
    HookType,
    LLMConfig,
    ProviderModelClient,
    ToolDefinition,
)
from agents_context.context import DEFAULT_PROMPTS, RESEARCH_ASSISTANT_CONFIG
from agents_context.llm.providers.openai import OpenAIProvider
from agents_context.observability import LogConfig, LogLevel, configure_logging


# ============================================================================
# Tool
# ============================================================================

KNOWLEDGE = {
    "superposition": (
        "A qubit in superposition is a weighted blend of |0> and |1>; "
        "measurement yields one outcome with probability given by the squared amplitude."
    ),
    "entanglement": (
        "Entangled qubits share a joint state that cannot be written as a product "
        "of individual states; measuring one fixes correlations with the other."
    ),
    "decoherence": (
        "Interaction with the environment leaks phase information, turning quantum "
        "superpositions into classical mixtures over time."
    ),
    "quantum gates": (
        "Gates are unitary operations on qubits, e.g. Hadamard creates superposition "
        "and CNOT entangles two qubits."
    ),
    "error correction": (
        "Logical qubits are encoded across many physical qubits so that errors can "
        "be detected through syndrome measurements and corrected."
    ),
}

RESEARCH_TOOL = ToolDefinition(
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


class TopicLookup:
    """Answers topic lookups from a small in-memory knowledge base."""

    async def execute(self, topic: str) -> str:
        key = topic.lower().strip()
        for name, text in KNOWLEDGE.items():
            if name in key or key in name:
                return text
        return f"No notes on {topic!r}; answer from general knowledge."


QUESTIONS = [
    "What is quantum superposition?",
    "How does entanglement differ from superposition?",
    "Why is decoherence a problem for quantum computers?",
    "Which quantum gates create entanglement?",
    "How does quantum error correction protect qubits?",
    "Can you recap the link between decoherence and error correction?",
]


# ============================================================================
# Main
# ============================================================================

async def run_research_session():
    """Run the question list through one session and print per-turn metrics."""
    load_dotenv()
    configure_logging(LogConfig(level=LogLevel.WARNING))

    provider = OpenAIProvider(LLMConfig.from_env(temperature=0.3))
    client = ProviderModelClient(
        provider,
        tools=[RESEARCH_TOOL],
        tool_executors={"quantumResearch": TopicLookup()},
        summary_prompt=DEFAULT_PROMPTS["research"],
    )

    hooks = HookRegistry()

    @hooks.register(HookType.ON_COMPACTION_FAILED)
    def report_failure(context, **kwargs):
        print(f"  compaction failed, continuing with full history: {kwargs['error']}")

    runner = ConversationRunner(client, RESEARCH_ASSISTANT_CONFIG, hooks=hooks)
    session = runner.new_session()

    print("=" * 60)
    print(f"Research session {session.session_id}")
    print("=" * 60)

    for number, question in enumerate(QUESTIONS, start=1):
        result = await runner.run_turn(session, question)
        observation = result.observation

        print(f"\n[{number}] {question}")
        print(
            f"  messages sent: {observation.message_count}, "
            f"estimated tokens: {observation.estimated_tokens}, "
            f"compacted: {observation.compaction_occurred}"
        )
        if observation.summary_text:
            print(f"  new summary:\n    {observation.summary_text}")
        print(f"\nAssistant: {result.response.content}")


if __name__ == "__main__":
    asyncio.run(run_research_session())
