"""Provider protocol definitions.

This module defines protocols for the collaborators the rotation watcher
depends on. They ensure consistent interfaces for production and test
implementations.
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable


@runtime_checkable
class SecretStore(Protocol):
    """Protocol defining the interface for secret stores.

    A secret store is stateless from the watcher's point of view and safe to
    call repeatedly. It returns the raw text stored under a key.

    The protocol is marked as runtime_checkable to allow isinstance()
    checks at runtime, which is useful for validation and testing.
    """

    async def fetch(self, key: str) -> str:
        """Fetch the current raw value stored under ``key``.

        Args:
            key: Secret name in the store

        Returns:
            Raw secret text. May be empty, which callers treat as a failure.

        Raises:
            SecretNotFoundError: If no value is stored under the key
            SecretStoreError: If the store could not be reached
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the store."""
        ...


@runtime_checkable
class ScheduledTask(Protocol):
    """Handle for a callback scheduled on a Timer."""

    def cancel(self) -> None:
        """Cancel the task. Has no effect once the task has run."""
        ...

    @property
    def cancelled(self) -> bool:
        ...


@runtime_checkable
class Timer(Protocol):
    """Protocol for one-shot delayed execution of coroutine callbacks.

    Recurring schedules are built by rescheduling from inside the callback,
    which guarantees runs never overlap.
    """

    def schedule(
        self,
        delay_seconds: float,
        callback: Callable[[], Awaitable[None]],
    ) -> ScheduledTask:
        """Run ``callback`` once after ``delay_seconds``.

        Args:
            delay_seconds: Delay before the callback runs
            callback: Coroutine function taking no arguments

        Returns:
            Handle that can cancel the pending run
        """
        ...
