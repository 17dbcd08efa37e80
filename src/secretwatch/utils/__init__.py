"""Utility decorators shared across secretwatch."""

from secretwatch.utils.decorators import retry_with_backoff, traced, with_timeout

__all__ = [
    "retry_with_backoff",
    "traced",
    "with_timeout",
]
