"""Async decorators for tracing, retries and timeouts.

Everything the watcher awaits on the network goes through these, so a slow
or flaky secret store shows up as spans and warnings instead of a stalled
poll cycle.
"""

import asyncio
import functools
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

from opentelemetry.trace import SpanKind, Status, StatusCode

from secretwatch.logging import get_logger
from secretwatch.telemetry import get_tracer

T = TypeVar('T')
AsyncFunc = Callable[..., Awaitable[T]]

logger = get_logger(__name__)


def traced(
    span_name: Optional[str] = None,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    attribute_getter: Optional[Callable[..., Optional[Dict[str, Any]]]] = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """Run a coroutine function inside an OpenTelemetry span.

    Args:
        span_name: Span name, the qualified function name by default
        kind: Span kind
        attributes: Static span attributes
        attribute_getter: Called with the function's arguments to compute
            extra attributes per call. None values are dropped.
    """

    def decorator(func: AsyncFunc) -> AsyncFunc:
        name = span_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            span_attributes = dict(attributes or {})
            if attribute_getter is not None:
                span_attributes.update(attribute_getter(*args, **kwargs) or {})

            tracer = get_tracer(func.__module__)
            with tracer.start_as_current_span(name, kind=kind) as span:
                for key, value in span_attributes.items():
                    if value is not None:
                        span.set_attribute(key, value)
                try:
                    return await func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise

        return wrapper

    return decorator


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retry_on: Optional[Tuple[Type[Exception], ...]] = None,
    retry_condition: Optional[Callable[[Exception], bool]] = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """Retry a coroutine function with exponential backoff.

    The n-th retry waits ``min(initial_delay * exponential_base ** n, max_delay)``
    seconds. There are at most ``max_retries + 1`` attempts in total; the last
    exception is re-raised.

    Args:
        max_retries: Retries after the first attempt
        initial_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for a single delay
        exponential_base: Growth factor between delays
        retry_on: Exception types worth retrying, all exceptions by default
        retry_condition: Extra predicate; returning False stops retrying

    Example:
        >>> @retry_with_backoff(
        ...     max_retries=2,
        ...     retry_condition=lambda exc: not isinstance(exc, SecretNotFoundError),
        ... )
        ... async def fetch(key: str) -> str:
        ...     return await client.get_secret(key)
    """

    def should_retry(exc: Exception) -> bool:
        if retry_on is not None and not isinstance(exc, retry_on):
            return False
        return retry_condition is None or retry_condition(exc)

    def decorator(func: AsyncFunc) -> AsyncFunc:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as exc:
                    if attempt >= max_retries or not should_retry(exc):
                        if attempt:
                            logger.error("%s failed after %d attempts", func.__name__, attempt + 1)
                        raise
                    attempt += 1
                    logger.warning(
                        "Attempt %d of %s failed: %s. Retrying in %.1f seconds",
                        attempt, func.__name__, exc, delay,
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * exponential_base, max_delay)

        return wrapper

    return decorator


def with_timeout(
    timeout_seconds: float,
    timeout_exception: Optional[Type[Exception]] = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """Bound each call of a coroutine function to ``timeout_seconds``.

    Raises ``timeout_exception`` (built from a message) instead of
    ``asyncio.TimeoutError`` when given. Applied under ``retry_with_backoff``
    the bound is per attempt.
    """

    def decorator(func: AsyncFunc) -> AsyncFunc:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout_seconds)
            except asyncio.TimeoutError as exc:
                if timeout_exception is None:
                    raise
                raise timeout_exception(
                    f"{func.__name__} timed out after {timeout_seconds} seconds"
                ) from exc

        return wrapper

    return decorator
