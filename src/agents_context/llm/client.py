"""Model client contracts consumed by the context window manager."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, runtime_checkable

from agents_context.llm.base import (
    LLMProvider,
    Message,
    MessageRole,
    ToolDefinition,
)
from agents_context.observability.logging import get_logger

if TYPE_CHECKING:
    from agents_context.context.summarizer import SummaryPrompt

logger = get_logger(__name__)


@runtime_checkable
class ModelClient(Protocol):
    """Protocol for the language model client.

    ``complete`` may append intermediate assistant tool-call messages and
    tool-result messages to ``messages`` before returning the final
    assistant message.
    """

    async def complete(self, messages: List[Message]) -> Message:
        """Produce the assistant message for a turn."""
        ...

    async def summarize(self, messages: List[Message]) -> str:
        """Condense messages into summary text."""
        ...


@runtime_checkable
class ToolExecutor(Protocol):
    """Protocol for an external capability invoked by the model client."""

    async def execute(self, topic: str) -> str:
        """Return explanatory text for a topic."""
        ...


class ProviderModelClient:
    """Model client backed by an :class:`LLMProvider`.

    Runs the tool-calling loop inside ``complete`` and builds summaries
    from a :class:`SummaryPrompt`.
    """

    def __init__(
        self,
        provider: LLMProvider,
        tools: Optional[List[ToolDefinition]] = None,
        tool_executors: Optional[Dict[str, ToolExecutor]] = None,
        summary_prompt: Optional[SummaryPrompt] = None,
        max_tool_rounds: int = 5,
    ):
        """Initialize provider-backed client.

        Args:
            provider: LLM provider used for both completion and summaries.
            tools: Tool definitions offered to the model.
            tool_executors: Executors keyed by tool name.
            summary_prompt: Prompt for summaries (defaults to "general").
            max_tool_rounds: Maximum model calls that may request tools.
        """
        self.provider = provider
        self.tools = tools or []
        self.tool_executors = tool_executors or {}
        self._summary_prompt = summary_prompt
        self.max_tool_rounds = max_tool_rounds

    @property
    def summary_prompt(self) -> SummaryPrompt:
        if self._summary_prompt is None:
            # Import here to avoid circular imports
            from agents_context.context.summarizer import DEFAULT_PROMPTS

            self._summary_prompt = DEFAULT_PROMPTS["general"]
        return self._summary_prompt

    async def _run_tool(self, name: str, arguments: Dict[str, Any]) -> str:
        executor = self.tool_executors.get(name)
        if executor is None:
            return f"Error: unknown tool {name!r}"
        topic = arguments.get("topic")
        if topic is None and arguments:
            topic = next(iter(arguments.values()))
        try:
            return await executor.execute(str(topic or ""))
        except Exception as e:
            logger.warning("Tool execution failed", tool=name, error=str(e))
            return f"Error: {e}"

    async def complete(self, messages: List[Message]) -> Message:
        """Complete a turn, resolving tool calls along the way.

        Args:
            messages: Conversation so far. Tool-call and tool-result
                messages are appended in place.

        Returns:
            The final assistant message (not appended).
        """
        tools = self.tools if self.tools and self.provider.supports_tools() else None

        for _ in range(self.max_tool_rounds):
            response = await self.provider.generate(messages, tools=tools)
            if not response.has_tool_calls:
                return response.to_message()

            messages.append(response.to_message())
            for tc in response.tool_calls or []:
                result = await self._run_tool(tc.name, tc.arguments)
                messages.append(
                    Message(
                        role=MessageRole.TOOL,
                        content=result,
                        name=tc.name,
                        tool_call_id=tc.id,
                    )
                )

        # Out of tool rounds: ask for a plain answer
        response = await self.provider.generate(messages)
        return Message(role=MessageRole.ASSISTANT, content=response.content or "")

    async def summarize(self, messages: List[Message]) -> str:
        """Summarize messages with a single generation call.

        Args:
            messages: Messages to condense.

        Returns:
            The raw summary text returned by the provider.
        """
        # Import here to avoid circular imports
        from agents_context.context.summarizer import format_conversation

        prompt = self.summary_prompt
        request = [
            Message(role=MessageRole.SYSTEM, content=prompt.system_prompt),
            Message(role=MessageRole.USER, content=prompt.render(format_conversation(messages))),
        ]
        response = await self.provider.generate(request)
        return response.content
