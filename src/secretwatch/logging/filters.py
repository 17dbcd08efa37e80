"""Logging filters for context injection.

This module provides filters that inject context variables into log records,
enabling correlation of logs across watchers and poll cycles.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional
from secretwatch.__version__ import __version__

watcher_var: ContextVar[Optional[str]] = ContextVar("watcher", default=None)
poll_cycle_var: ContextVar[Optional[int]] = ContextVar("poll_cycle", default=None)

_static_environment: Optional[str] = None
_static_extra: Dict[str, Any] = {}


class ContextFilter(logging.Filter):
    """Logging filter that adds context variables to log records.

    This filter extracts values from context variables and adds them to
    log records, enabling log correlation across async poll cycles.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context variables to the log record.

        Args:
            record: Log record to enhance

        Returns:
            Always True (doesn't filter out any records)
        """
        setattr(record, "watcher", watcher_var.get())
        setattr(record, "poll_cycle", poll_cycle_var.get())
        setattr(record, "sdk_name", "secretwatch")
        setattr(record, "sdk_version", __version__)

        if _static_environment is not None:
            setattr(record, "environment", _static_environment)
        for key, value in _static_extra.items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


def set_logging_context(
    environment: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Set process-wide context added to every record (e.g. app environment)."""
    global _static_environment, _static_extra
    _static_environment = environment
    _static_extra = dict(extra or {})


def set_watch_context(
    watcher: Optional[str] = None,
    poll_cycle: Optional[int] = None,
) -> None:
    """Set watcher context variables."""
    if watcher is not None:
        watcher_var.set(watcher)
    if poll_cycle is not None:
        poll_cycle_var.set(poll_cycle)


def clear_watch_context() -> None:
    """Clear all watcher context variables."""
    watcher_var.set(None)
    poll_cycle_var.set(None)
