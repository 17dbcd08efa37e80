"""Protocol definitions for secretwatch.

Protocols provide type-safe interfaces without requiring inheritance,
following Python's structural subtyping (duck typing with type hints).
"""

from .providers import ScheduledTask, SecretStore, Timer

__all__ = [
    "SecretStore",
    "ScheduledTask",
    "Timer",
]
