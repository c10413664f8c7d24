"""Exceptions raised by context window management."""

from __future__ import annotations

from typing import Optional


class ContextWindowError(Exception):
    """Base exception for context window errors."""

    pass


class SummarizationFailed(ContextWindowError):
    """The model client produced no usable summary.

    Raised by the summarizer and recovered by the context window manager,
    which leaves history untouched and reports the failure on the turn.
    """

    def __init__(
        self,
        message: str,
        message_count: int = 0,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message_count = message_count
        self.cause = cause


class InvalidConfigurationError(ContextWindowError, ValueError):
    """Raised when a trigger or retention specification cannot be parsed."""

    pass
