"""Logging infrastructure for secretwatch.

This module provides structured logging with JSON output and context
tracking, so poll-cycle diagnostics can be correlated per watcher.
"""

from secretwatch.logging.filters import (
    ContextFilter,
    clear_watch_context,
    set_logging_context,
    set_watch_context,
)
from secretwatch.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "set_logging_context",
    "set_watch_context",
    "clear_watch_context",
]
