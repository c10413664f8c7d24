"""Local fixtures for observability tests."""

from __future__ import annotations

import logging

import pytest

from agents_context.observability.logging import (
    ContextLogger,
    LogConfig,
    LogContext,
    clear_context,
    clear_global_context,
    configure_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore default logging state after each test."""
    yield
    clear_context()
    clear_global_context()
    package_logger = logging.getLogger("agents_context")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    configure_logging(LogConfig())


@pytest.fixture
def log_context() -> LogContext:
    return LogContext(correlation_id="corr-1", session_id="session-1", turn=3)


@pytest.fixture
def context_logger() -> ContextLogger:
    return ContextLogger("agents_context.test")
