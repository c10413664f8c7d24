"""Conversation messages, provider configuration and the provider contract."""

from __future__ import annotations

import asyncio
import os
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    List,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from agents_context.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# ============================================================================
# Provider errors
# ============================================================================


class LLMProviderError(Exception):
    """A provider call failed.

    Attributes:
        provider: Name of the provider that raised.
        status_code: HTTP status of the failed call, when there was one.
        response: Raw error payload, if the provider exposed it.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response = response


class RateLimitError(LLMProviderError):
    pass


class AuthenticationError(LLMProviderError):
    pass


class InvalidRequestError(LLMProviderError):
    pass


class ProviderConnectionError(LLMProviderError):
    """The endpoint could not be reached or timed out."""
    pass


# ============================================================================
# Messages
# ============================================================================


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    SUMMARY = "summary"  # Synthetic context produced by compaction


@dataclass
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ToolDefinition:
    """A tool offered to the model. ``parameters`` is a JSON Schema."""

    name: str
    description: str
    parameters: Dict[str, Any]


@dataclass
class Message:
    """One entry of a conversation history.

    An assistant message may issue ``tool_calls``; each result comes back as
    a ``tool`` message whose ``tool_call_id`` names the call it answers.
    How a message is put on the wire is up to each provider.
    """

    role: MessageRole
    content: str = ""
    name: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None

    @property
    def is_tool_result(self) -> bool:
        return self.tool_call_id is not None

    @property
    def is_summary(self) -> bool:
        return self.role == MessageRole.SUMMARY

    @property
    def issued_call_ids(self) -> List[str]:
        return [call.id for call in self.tool_calls or []]


@dataclass
class LLMResponse:
    """A provider's answer to one generate call."""

    content: str
    model: str
    finish_reason: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    usage: Optional[Dict[str, int]] = None
    raw_response: Optional[Any] = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def to_message(self) -> Message:
        """The assistant message to append to history."""
        return Message(
            role=MessageRole.ASSISTANT,
            content=self.content or "",
            tool_calls=self.tool_calls or None,
        )


# ============================================================================
# Configuration
# ============================================================================


@dataclass
class RetryConfig:
    """Backoff policy for transient provider failures.

    Retry ``n`` (counting from 0) waits ``base_delay * multiplier ** n``
    seconds, capped at ``max_delay``. With jitter the wait is scaled by a
    random factor in [0.5, 1.5).
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    multiplier: float = 2.0
    jitter: bool = True
    retry_on_status: FrozenSet[int] = frozenset({408, 429, 500, 502, 503, 504})

    def get_delay(self, attempt: int) -> float:
        delay = min(self.base_delay * self.multiplier ** attempt, self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay

    def is_retryable(self, error: LLMProviderError) -> bool:
        if isinstance(error, (RateLimitError, ProviderConnectionError)):
            return True
        return error.status_code in self.retry_on_status


@dataclass
class LLMConfig:
    """Model and endpoint settings for a provider."""

    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = 60.0
    retry_config: Optional[RetryConfig] = None
    extra_params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.model:
            raise ValueError("model is required")
        if self.retry_config is None:
            self.retry_config = RetryConfig()

    @classmethod
    def from_env(
        cls,
        prefix: str = "AI_",
        environ: Optional[Dict[str, str]] = None,
        **overrides: Any,
    ) -> "LLMConfig":
        """Build a config from ``<prefix>MODEL``, ``<prefix>ENDPOINT`` and ``<prefix>API_KEY``.

        Empty variables count as unset. Keyword overrides win over the
        environment.

        Raises:
            ValueError: If no model name is available.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {
            "model": env.get(f"{prefix}MODEL", ""),
            "base_url": env.get(f"{prefix}ENDPOINT") or None,
            "api_key": env.get(f"{prefix}API_KEY") or None,
        }
        values.update(overrides)
        return cls(**values)


# ============================================================================
# Provider contract
# ============================================================================


@runtime_checkable
class LLMProvider(Protocol):
    """What :class:`~agents_context.llm.client.ProviderModelClient` needs from a provider."""

    config: LLMConfig

    async def generate(
        self,
        messages: List[Message],
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        ...

    def supports_tools(self) -> bool:
        ...


class BaseLLMProvider(ABC):
    """Config holder and retry loop shared by concrete providers.

    Subclasses own their wire format and translate SDK failures into
    :class:`LLMProviderError` so the retry policy can classify them.
    """

    name: str = "base"

    def __init__(self, config: LLMConfig):
        self.config = config

    @abstractmethod
    async def generate(
        self,
        messages: List[Message],
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        pass

    @abstractmethod
    def supports_tools(self) -> bool:
        pass

    async def _retry_with_backoff(self, call: Callable[[], Awaitable[T]]) -> T:
        """Await ``call()`` until it succeeds or the retry policy gives up.

        Only retryable :class:`LLMProviderError` failures are retried; any
        other exception propagates at once.
        """
        policy = self.config.retry_config or RetryConfig()
        attempt = 0
        while True:
            try:
                return await call()
            except LLMProviderError as e:
                if attempt >= policy.max_retries or not policy.is_retryable(e):
                    raise
                delay = policy.get_delay(attempt)
                logger.warning(
                    "Provider call failed, retrying",
                    provider=self.name,
                    attempt=attempt + 1,
                    status_code=e.status_code,
                    delay=round(delay, 2),
                )
                attempt += 1
                await asyncio.sleep(delay)
