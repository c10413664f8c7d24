"""Structured logging with context.

This module provides a logging system with:
- Structured logging using structlog
- Context propagation (session and turn) through context variables
- Correlation IDs for request tracking
- Optional rotating file output
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

import structlog
from structlog.types import Processor


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_int(self) -> int:
        """Convert to logging module integer level."""
        return {
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
            LogLevel.CRITICAL: logging.CRITICAL,
        }[self]


@dataclass
class LogContext:
    """Context included in all log entries of the current execution scope.

    Attributes:
        correlation_id: ID for tracking related operations.
        session_id: ID of the conversation session.
        turn: Turn number within the session.
        extra: Additional context data.
    """

    correlation_id: Optional[str] = None
    session_id: Optional[str] = None
    turn: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for logging."""
        result: Dict[str, Any] = {}
        if self.correlation_id:
            result["correlation_id"] = self.correlation_id
        if self.session_id:
            result["session_id"] = self.session_id
        if self.turn is not None:
            result["turn"] = self.turn
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> "LogContext":
        """Create a new context with additional data."""
        return LogContext(
            correlation_id=self.correlation_id,
            session_id=self.session_id,
            turn=self.turn,
            extra={**self.extra, **kwargs},
        )


_log_context: ContextVar[Optional[LogContext]] = ContextVar(
    "log_context", default=None
)

# Context that applies to all log entries
_global_context: Dict[str, Any] = {}


def set_context(context: LogContext) -> None:
    """Set the current log context."""
    _log_context.set(context)


def get_context() -> Optional[LogContext]:
    """Get the current log context."""
    return _log_context.get()


def clear_context() -> None:
    """Clear the current log context."""
    _log_context.set(None)


def set_global_context(**kwargs: Any) -> None:
    """Set global context that applies to all log entries."""
    _global_context.update(kwargs)


def clear_global_context() -> None:
    """Clear all global context."""
    _global_context.clear()


def get_global_context() -> Dict[str, Any]:
    """Get the global context."""
    return _global_context.copy()


@dataclass
class FileExporter:
    """Rotating file output configuration."""

    path: Union[str, Path] = "agents_context.log"
    min_level: LogLevel = LogLevel.DEBUG
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class LogConfig:
    """Configuration for the logging system.

    Attributes:
        level: Minimum log level.
        json_format: Render JSON instead of console output.
        include_caller: Add caller module/function/line.
        stream: Stream console output is written to.
        file_exporter: Optional rotating file output.
    """

    level: LogLevel = LogLevel.INFO
    json_format: bool = False
    include_caller: bool = False
    stream: TextIO = field(default_factory=lambda: sys.stderr)
    file_exporter: Optional[FileExporter] = None


class ContextLogger:
    """Structured logger with automatic context inclusion."""

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
    ):
        """Initialize the logger.

        Args:
            name: Logger name (usually module name).
            config: Optional logging configuration.
        """
        self.name = name
        self.config = config or _config
        self._logger = structlog.get_logger(name)

    def _get_merged_context(self, **extra: Any) -> Dict[str, Any]:
        """Merge global, scoped and call-site context."""
        context: Dict[str, Any] = {"logger": self.name}
        context.update(_global_context)

        log_context = get_context()
        if log_context:
            context.update(log_context.to_dict())

        context.update(extra)
        return context

    def bind(self, **kwargs: Any) -> "ContextLogger":
        """Create a new logger with bound context."""
        new_logger = ContextLogger(self.name, self.config)
        new_logger._logger = self._logger.bind(**kwargs)
        return new_logger

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(msg, **self._get_merged_context(**kwargs))

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(msg, **self._get_merged_context(**kwargs))

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(msg, **self._get_merged_context(**kwargs))

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an error message."""
        self._logger.error(msg, **self._get_merged_context(**kwargs))

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(msg, **self._get_merged_context(**kwargs))

    def log(self, level: LogLevel, msg: str, **kwargs: Any) -> None:
        """Log a message at the specified level."""
        getattr(self, level.value)(msg, **kwargs)


_config = LogConfig()
_loggers: Dict[str, ContextLogger] = {}


def get_logger(name: str = "agents_context") -> ContextLogger:
    """Get or create a logger instance.

    Args:
        name: Logger name.

    Returns:
        ContextLogger instance.
    """
    if name not in _loggers:
        _loggers[name] = ContextLogger(name)
    return _loggers[name]


def configure_logging(config: LogConfig) -> None:
    """Configure structlog processors and outputs.

    Args:
        config: Logging configuration to apply.
    """
    global _config
    _config = config

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if config.json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    if config.file_exporter is None:
        logger_factory: Any = structlog.PrintLoggerFactory(file=config.stream)
    else:
        # Route rendered lines through stdlib so the file handler can rotate
        logger_factory = structlog.stdlib.LoggerFactory()
        _setup_stdlib_handlers(config)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(config.level.to_int()),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )

    for logger in _loggers.values():
        logger.config = config
        logger._logger = structlog.get_logger(logger.name)


def _setup_stdlib_handlers(config: LogConfig) -> None:
    """Attach console and rotating file handlers to the package logger."""
    package_logger = logging.getLogger("agents_context")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    package_logger.setLevel(config.level.to_int())
    package_logger.propagate = False

    console = logging.StreamHandler(config.stream)
    console.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(console)

    if config.file_exporter is not None:
        package_logger.addHandler(_build_file_handler(config.file_exporter))


def _build_file_handler(exporter: FileExporter) -> RotatingFileHandler:
    """Build a rotating file handler for rendered log lines."""
    path = Path(exporter.path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        path,
        maxBytes=exporter.max_bytes,
        backupCount=exporter.backup_count,
    )
    handler.setLevel(exporter.min_level.to_int())
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler
