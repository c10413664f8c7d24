"""Observability for context management: structured logging."""

from .logging import (
    ContextLogger,
    FileExporter,
    LogConfig,
    LogContext,
    LogLevel,
    clear_context,
    clear_global_context,
    configure_logging,
    get_context,
    get_global_context,
    get_logger,
    set_context,
    set_global_context,
)

__all__ = [
    "ContextLogger",
    "FileExporter",
    "LogConfig",
    "LogContext",
    "LogLevel",
    "clear_context",
    "clear_global_context",
    "configure_logging",
    "get_context",
    "get_global_context",
    "get_logger",
    "set_context",
    "set_global_context",
]
