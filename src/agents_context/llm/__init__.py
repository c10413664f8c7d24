"""LLM provider abstraction and model client contracts."""

from .base import (
    AuthenticationError,
    BaseLLMProvider,
    InvalidRequestError,
    LLMConfig,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    Message,
    MessageRole,
    ProviderConnectionError,
    RateLimitError,
    RetryConfig,
    ToolCall,
    ToolDefinition,
)
from .client import ModelClient, ProviderModelClient, ToolExecutor

__all__ = [
    "AuthenticationError",
    "BaseLLMProvider",
    "InvalidRequestError",
    "LLMConfig",
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "Message",
    "MessageRole",
    "ModelClient",
    "ProviderConnectionError",
    "ProviderModelClient",
    "RateLimitError",
    "RetryConfig",
    "ToolCall",
    "ToolDefinition",
    "ToolExecutor",
]
