"""Logging setup for secretwatch.

Records are emitted as one JSON object per line so they can be shipped as-is
by the container log collector. Watcher context and, when a span is active,
the OpenTelemetry trace/span ids are added to every record. Configuration is
declarative through ``logging.config.dictConfig``.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional

from opentelemetry import trace

DEFAULT_LEVEL = "INFO"

_STANDARD_ATTRIBUTES: FrozenSet[str] = frozenset(
    vars(logging.LogRecord("probe", logging.INFO, __file__, 0, "", (), None))
) | {"asctime", "message"}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class CustomJsonFormatter(logging.Formatter):
    """Render a record, its ``extra`` fields and trace ids as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRIBUTES and key not in entry
        )

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            entry["trace_id"] = format(span_context.trace_id, "032x")
            entry["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # str() keeps SecretStr values masked
        return json.dumps(entry, default=str)


def setup_logging(level: Optional[str] = None, json_output: bool = True) -> None:
    """Configure root logging.

    Args:
        level: Log level name. Falls back to ``LOG_LEVEL``, then INFO.
        json_output: Emit JSON lines. Plain text is easier to read when
            running locally.
    """
    level = (level or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL).upper()

    config_dict: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "sw_json": {
                "()": "secretwatch.logging.logger.CustomJsonFormatter",
            },
            "sw_text": {
                "format": "%(asctime)s %(levelname)s [%(name)s] [%(watcher)s] %(message)s",
            },
        },
        "filters": {
            "sw_context": {
                "()": "secretwatch.logging.filters.ContextFilter",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "sw_json" if json_output else "sw_text",
                "filters": ["sw_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(config_dict)
