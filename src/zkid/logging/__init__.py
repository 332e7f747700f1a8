"""zkid structured logging.

Audit logging used by the circuit-input generators, with JSON and text
formatting and console or in-memory handlers.
"""

from .core import (
    LogConfig,
    LogContext,
    LogEntry,
    LogFormatter,
    LogHandler,
    LogLevel,
    LogManager,
    ZkidLogger,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from .formatters import JSONFormatter, TextFormatter
from .handlers import ConsoleHandler, MemoryHandler

__all__ = [
    # Core
    "LogLevel",
    "LogConfig",
    "LogContext",
    "LogEntry",
    "LogFormatter",
    "LogHandler",
    "LogManager",
    "ZkidLogger",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Handlers
    "ConsoleHandler",
    "MemoryHandler",
]
