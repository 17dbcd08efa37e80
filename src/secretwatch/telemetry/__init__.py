"""OpenTelemetry helpers for instrumentation.

Only the OpenTelemetry API is used here; installing and configuring an SDK
(exporters, processors) is left to the host application.
"""

from typing import Optional

from opentelemetry import metrics, trace

__all__ = [
    "INSTRUMENTATION_NAME",
    "get_tracer",
    "get_meter",
]

INSTRUMENTATION_NAME = "secretwatch"


def get_tracer(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None):
    """Return a tracer from the active OpenTelemetry provider."""
    return trace.get_tracer(name, version)


def get_meter(name: str = INSTRUMENTATION_NAME, version: Optional[str] = None):
    """Return a meter from the active OpenTelemetry provider."""
    return metrics.get_meter(name, version)
