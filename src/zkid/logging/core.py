"""Structured audit logging for zkid.

Input generators record one structured entry per circuit-input object they
produce. Entries carry the document scheme and operation so that a registration
or disclosure flow can be traced without ever logging the record itself.
"""

import json
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Log levels."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LEVEL_ORDER = {level: i for i, level in enumerate(LogLevel)}


@dataclass
class LogContext:
    """Log context information."""

    scheme: Optional[str] = None
    operation: Optional[str] = None
    attestation_id: Optional[str] = None
    request_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "scheme": self.scheme,
            "operation": self.operation,
            "attestation_id": self.attestation_id,
            "request_id": self.request_id,
            "metadata": self.metadata,
        }

    def merged_with(self, other: Optional["LogContext"]) -> "LogContext":
        """Return a context where fields set on ``other`` win."""
        if other is None:
            return self
        return LogContext(
            scheme=other.scheme or self.scheme,
            operation=other.operation or self.operation,
            attestation_id=other.attestation_id or self.attestation_id,
            request_id=other.request_id or self.request_id,
            metadata={**self.metadata, **other.metadata},
        )


@dataclass
class LogEntry:
    """Log entry data structure."""

    timestamp: float
    level: LogLevel
    message: str
    logger_name: str
    context: LogContext
    exception: Optional[Exception] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    thread_id: Optional[int] = None
    process_id: Optional[int] = None

    def __post_init__(self):
        if self.thread_id is None:
            self.thread_id = threading.get_ident()
        if self.process_id is None:
            self.process_id = os.getpid()

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary."""
        return {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "message": self.message,
            "logger_name": self.logger_name,
            "context": self.context.to_dict(),
            "exception": str(self.exception) if self.exception else None,
            "extra": self.extra,
            "thread_id": self.thread_id,
            "process_id": self.process_id,
        }

    def to_json(self) -> str:
        """Convert log entry to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class LogConfig:
    """Log configuration."""

    def __init__(
        self,
        name: str = "zkid",
        level: LogLevel = LogLevel.INFO,
        handlers: List[str] = None,
    ):
        self.name = name
        self.level = level
        self.handlers = handlers or ["console"]


class LogFormatter(ABC):
    """Abstract log formatter."""

    @abstractmethod
    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        pass


class LogHandler(ABC):
    """Abstract log handler."""

    def __init__(self, name: str = None):
        self.name = name or self.__class__.__name__
        self.formatter: Optional[LogFormatter] = None
        self.level: LogLevel = LogLevel.DEBUG
        self._lock = threading.RLock()

    def set_formatter(self, formatter: LogFormatter) -> None:
        with self._lock:
            self.formatter = formatter

    def set_level(self, level: LogLevel) -> None:
        with self._lock:
            self.level = level

    def should_handle(self, entry: LogEntry) -> bool:
        """Check if handler should handle the entry."""
        with self._lock:
            return _LEVEL_ORDER[entry.level] >= _LEVEL_ORDER[self.level]

    @abstractmethod
    def emit(self, entry: LogEntry) -> None:
        """Emit log entry."""
        pass

    def handle(self, entry: LogEntry) -> None:
        if self.should_handle(entry):
            self.emit(entry)


class LogManager:
    """Routes entries from named loggers to the configured handlers."""

    def __init__(self, config: LogConfig = None):
        self.config = config or LogConfig()
        self.loggers: Dict[str, "ZkidLogger"] = {}
        self.handlers: Dict[str, LogHandler] = {}
        self._lock = threading.RLock()
        self._context = LogContext()

        from .formatters import TextFormatter
        from .handlers import ConsoleHandler

        console = ConsoleHandler(stream=sys.stderr)
        console.set_formatter(TextFormatter())
        self.add_handler("console", console)

    def get_logger(self, name: str) -> "ZkidLogger":
        """Get logger."""
        with self._lock:
            if name not in self.loggers:
                self.loggers[name] = ZkidLogger(name, self, self.config.level)
            return self.loggers[name]

    def add_handler(self, name: str, handler: LogHandler) -> None:
        with self._lock:
            self.handlers[name] = handler

    def remove_handler(self, name: str) -> None:
        with self._lock:
            self.handlers.pop(name, None)

    def set_context(self, context: LogContext) -> None:
        """Set global context."""
        with self._lock:
            self._context = context

    def get_context(self) -> LogContext:
        with self._lock:
            return self._context

    def log(
        self,
        level: LogLevel,
        message: str,
        logger_name: str = "root",
        context: LogContext = None,
        exception: Exception = None,
        extra: Dict[str, Any] = None,
    ) -> None:
        """Log a message."""
        with self._lock:
            entry = LogEntry(
                timestamp=time.time(),
                level=level,
                message=message,
                logger_name=logger_name,
                context=self._context.merged_with(context),
                exception=exception,
                extra=extra or {},
            )

            for handler_name in self.config.handlers:
                if handler_name in self.handlers:
                    self.handlers[handler_name].handle(entry)

    def shutdown(self) -> None:
        """Shutdown log manager."""
        with self._lock:
            for handler in self.handlers.values():
                if hasattr(handler, "close"):
                    handler.close()
            self.loggers.clear()
            self.handlers.clear()


class ZkidLogger:
    """Named logger bound to a LogManager."""

    def __init__(self, name: str, manager: LogManager, level: LogLevel = LogLevel.INFO):
        self.name = name
        self.manager = manager
        self.level = level
        self._lock = threading.RLock()

    def set_level(self, level: LogLevel) -> None:
        with self._lock:
            self.level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        with self._lock:
            return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.level]

    def log(
        self,
        level: LogLevel,
        message: str,
        context: LogContext = None,
        exception: Exception = None,
        extra: Dict[str, Any] = None,
    ) -> None:
        if self.is_enabled_for(level):
            self.manager.log(
                level=level,
                message=message,
                logger_name=self.name,
                context=context,
                exception=exception,
                extra=extra,
            )

    def trace(self, message: str, **kwargs) -> None:
        self.log(LogLevel.TRACE, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self.log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self.log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self.log(LogLevel.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log the exception currently being handled at ERROR level."""
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            kwargs["exception"] = exc_info[1]
        self.log(LogLevel.ERROR, message, **kwargs)


# Global log manager instance
_global_manager: Optional[LogManager] = None


def get_logger(name: str = "root") -> ZkidLogger:
    """Get logger instance."""
    global _global_manager
    if _global_manager is None:
        _global_manager = LogManager()
    return _global_manager.get_logger(name)


def setup_logging(config: LogConfig) -> LogManager:
    """Setup logging with configuration."""
    global _global_manager
    if _global_manager is not None:
        _global_manager.shutdown()
    _global_manager = LogManager(config)
    return _global_manager


def shutdown_logging() -> None:
    """Shutdown logging."""
    global _global_manager
    if _global_manager is not None:
        _global_manager.shutdown()
        _global_manager = None
