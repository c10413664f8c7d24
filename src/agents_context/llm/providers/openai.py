"""OpenAI chat completions provider.

Also serves any OpenAI-compatible endpoint through ``LLMConfig.base_url``.

Wire mapping of the conversation model:
- ``summary`` messages go out as ``system``; chat APIs have no role for
  synthetic context.
- Assistant tool calls carry JSON-encoded arguments; tool results keep
  the ``tool_call_id`` of the call they answer.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

import openai
from openai import AsyncOpenAI

from ..base import (
    AuthenticationError,
    BaseLLMProvider,
    InvalidRequestError,
    LLMConfig,
    LLMProviderError,
    LLMResponse,
    Message,
    MessageRole,
    ProviderConnectionError,
    RateLimitError,
    ToolCall,
    ToolDefinition,
)

# First match wins; APITimeoutError is an APIConnectionError
_ERROR_TABLE: Tuple[Tuple[Type[Exception], Type[LLMProviderError]], ...] = (
    (openai.RateLimitError, RateLimitError),
    (openai.AuthenticationError, AuthenticationError),
    (openai.BadRequestError, InvalidRequestError),
    (openai.APIConnectionError, ProviderConnectionError),
)


def encode_message(msg: Message) -> Dict[str, Any]:
    """One history entry as a chat completions message."""
    if msg.role == MessageRole.SUMMARY:
        return {"role": "system", "content": msg.content}

    if msg.role == MessageRole.TOOL:
        return {"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id}

    wire: Dict[str, Any] = {"role": msg.role.value, "content": msg.content}
    if msg.name and msg.role in (MessageRole.USER, MessageRole.SYSTEM):
        wire["name"] = msg.name
    if msg.role == MessageRole.ASSISTANT and msg.tool_calls:
        wire["content"] = msg.content or None
        wire["tool_calls"] = [_encode_tool_call(call) for call in msg.tool_calls]
    return wire


def _encode_tool_call(call: ToolCall) -> Dict[str, Any]:
    arguments = call.arguments if isinstance(call.arguments, str) else json.dumps(call.arguments)
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": arguments},
    }


def encode_tools(tools: Optional[Sequence[ToolDefinition]]) -> Optional[List[Dict[str, Any]]]:
    if not tools:
        return None
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }
        for tool in tools
    ]


def decode_tool_calls(raw_calls: Optional[Sequence[Any]]) -> Optional[List[ToolCall]]:
    """SDK tool calls as :class:`ToolCall` objects with parsed arguments.

    Raises:
        InvalidRequestError: If the model produced arguments that are not JSON.
    """
    if not raw_calls:
        return None
    calls = []
    for raw in raw_calls:
        arguments = raw.function.arguments
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments else {}
            except json.JSONDecodeError as e:
                raise InvalidRequestError(
                    f"Malformed arguments for tool {raw.function.name!r}: {e}",
                    provider=OpenAIProvider.name,
                ) from e
        calls.append(ToolCall(id=raw.id, name=raw.function.name, arguments=arguments))
    return calls


def decode_completion(completion: Any) -> LLMResponse:
    choice = completion.choices[0]
    usage = completion.usage
    return LLMResponse(
        content=choice.message.content or "",
        model=completion.model,
        finish_reason=choice.finish_reason,
        tool_calls=decode_tool_calls(choice.message.tool_calls),
        usage={
            "prompt_tokens": usage.prompt_tokens,
            "completion_tokens": usage.completion_tokens,
            "total_tokens": usage.total_tokens,
        }
        if usage
        else None,
        raw_response=completion,
    )


def translate_error(error: Exception) -> LLMProviderError:
    """Map an SDK exception onto the provider error hierarchy."""
    status_code = getattr(error, "status_code", None)
    body = getattr(error, "body", None)
    for sdk_type, error_type in _ERROR_TABLE:
        if isinstance(error, sdk_type):
            return error_type(str(error), provider=OpenAIProvider.name, status_code=status_code, response=body)
    return LLMProviderError(str(error), provider=OpenAIProvider.name, status_code=status_code, response=body)


class OpenAIProvider(BaseLLMProvider):
    """Provider for the OpenAI chat completions API and compatible endpoints."""

    name = "openai"

    def __init__(self, config: LLMConfig, client: Optional[Any] = None):
        """Initialize OpenAI provider.

        Args:
            config: Model, key, endpoint and retry settings.
            client: Pre-built async client, mainly for tests.
        """
        super().__init__(config)
        self._client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    def supports_tools(self) -> bool:
        return True

    def build_request(
        self,
        messages: Sequence[Message],
        tools: Optional[Sequence[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        """Keyword arguments for ``chat.completions.create``.

        Precedence, lowest first: config defaults, ``extra_params``, call
        keyword arguments.
        """
        request: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [encode_message(msg) for msg in messages],
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens:
            request["max_tokens"] = self.config.max_tokens
        wire_tools = encode_tools(tools)
        if wire_tools:
            request["tools"] = wire_tools
        request.update(self.config.extra_params)
        request.update(kwargs)
        return request

    async def generate(
        self,
        messages: List[Message],
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        request = self.build_request(messages, tools, **kwargs)

        async def attempt() -> LLMResponse:
            try:
                completion = await self._client.chat.completions.create(**request)
            except openai.OpenAIError as e:
                raise translate_error(e) from e
            return decode_completion(completion)

        return await self._retry_with_backoff(attempt)
