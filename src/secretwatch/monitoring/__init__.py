"""Monitoring infrastructure for the rotation watcher.

This module provides OpenTelemetry counters and local running totals for
poll cycles, fetch failures and rotations.
"""

from secretwatch.monitoring.metrics import WatcherMetrics, WatcherStats

__all__ = [
    "WatcherMetrics",
    "WatcherStats",
]
