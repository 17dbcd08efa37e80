"""Credential rotation watcher.

The watcher loads a fixed set of tracked secrets once, then re-fetches them
on a timer. When any successfully parsed value differs from the cached one,
it invokes the rotation callback a single time and stops polling. Restarting
the process is the caller's job; the new process loads the fresh values.

State machine::

    UNINITIALIZED -> LOADING -> READY -> ROTATION_DETECTED
                        |         |
                        v         v
                      FAILED   STOPPED
"""

import asyncio
import inspect
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple, Union

from secretwatch.common.exceptions import (
    InvalidCredentialError,
    SecretNotFoundError,
    WatcherStateError,
)
from secretwatch.logging import get_logger
from secretwatch.logging.filters import set_watch_context
from secretwatch.monitoring.metrics import WatcherMetrics
from secretwatch.protocols.providers import ScheduledTask, SecretStore, Timer
from secretwatch.types.credentials import CredentialSnapshot, FailureReason, RetrievalOutcome
from secretwatch.utils.decorators import traced
from .timers import AsyncioTimer
from .tracked import TrackedSecret

logger = get_logger(__name__)

RotationCallback = Callable[[], Union[None, Awaitable[None]]]


class WatcherState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ROTATION_DETECTED = "rotation_detected"
    FAILED = "failed"
    STOPPED = "stopped"


class RotationWatcher:
    """Watches tracked secrets and signals a restart when one is rotated.

    Only one timeline mutates the cache: poll cycles are scheduled one at a
    time (the next one after the previous finished) and ``poll_once`` runs
    under a lock, so the callback fires at most once even if a cycle is
    also triggered by hand.

    Args:
        store: Secret store the values are fetched from
        secrets: Tracked secrets, checked in this order every cycle
        poll_interval_seconds: Delay between the end of one cycle and the next
        timer: Scheduler for poll cycles, AsyncioTimer by default
        metrics: Metrics collector, created per watcher by default
        name: Watcher name used in logs and metrics
    """

    def __init__(
        self,
        store: SecretStore,
        secrets: Iterable[TrackedSecret],
        *,
        poll_interval_seconds: float = 300.0,
        timer: Optional[Timer] = None,
        metrics: Optional[WatcherMetrics] = None,
        name: str = "secrets",
    ):
        self._secrets: Tuple[TrackedSecret, ...] = tuple(secrets)
        if not self._secrets:
            raise ValueError("RotationWatcher needs at least one tracked secret")
        names = [secret.name for secret in self._secrets]
        if len(set(names)) != len(names):
            raise ValueError(f"Tracked secret names must be unique: {names}")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")

        self.name = name
        self._store = store
        self._poll_interval = poll_interval_seconds
        self._timer = timer or AsyncioTimer()
        self._metrics = metrics or WatcherMetrics(name)

        self._state = WatcherState.UNINITIALIZED
        self._snapshot = CredentialSnapshot()
        self._on_rotation: Optional[RotationCallback] = None
        self._pending: Optional[ScheduledTask] = None
        self._running: Optional[ScheduledTask] = None
        self._cycle_lock = asyncio.Lock()
        self._cycles = 0

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def snapshot(self) -> CredentialSnapshot:
        return self._snapshot

    @property
    def secrets(self) -> Tuple[TrackedSecret, ...]:
        return self._secrets

    @property
    def poll_interval_seconds(self) -> float:
        return self._poll_interval

    @property
    def metrics(self) -> WatcherMetrics:
        return self._metrics

    @property
    def is_polling(self) -> bool:
        """True while a poll cycle is scheduled or running."""
        return self._pending is not None or self._running is not None

    @traced("secretwatch.watcher.start")
    async def start(self, on_rotation: RotationCallback) -> CredentialSnapshot:
        """Load every tracked secret and start polling for rotations.

        Secrets with a preloaded value are taken as loaded and never fetched.
        All other secrets must fetch and parse successfully; there is no
        partial start.

        Args:
            on_rotation: Zero-argument callback invoked once when a rotation
                is detected. It should initiate process shutdown. A coroutine
                function is awaited.

        Returns:
            The credential snapshot, kept current by the watcher

        Raises:
            InvalidCredentialError: If a secret is empty, unavailable or
                malformed. No polling is scheduled in that case.
            WatcherStateError: If the watcher was already started
        """
        if self._state is not WatcherState.UNINITIALIZED:
            raise WatcherStateError(
                f"Watcher '{self.name}' cannot start from state {self._state.value}",
                details={"state": self._state.value},
            )

        self._state = WatcherState.LOADING
        set_watch_context(watcher=self.name)
        loaded = []
        try:
            for secret in self._secrets:
                if secret.is_overridden:
                    logger.info("Using local override for secret %s", secret.store_key)
                    value = secret.preloaded_value
                else:
                    outcome = await self._retrieve(secret)
                    if not outcome.ok:
                        raise InvalidCredentialError(
                            secret.store_key,
                            outcome.describe(),
                        ) from outcome.error
                    value = outcome.value
                loaded.append((secret, value))
        except BaseException:
            self._state = WatcherState.FAILED
            raise

        for secret, value in loaded:
            secret.record(value)
            self._snapshot._update(secret.name, value)

        self._on_rotation = on_rotation
        self._state = WatcherState.READY
        self._schedule_next()
        logger.info(
            "Loaded %d credentials, checking for rotation every %s seconds",
            len(loaded),
            self._poll_interval,
            extra={"credentials": self._snapshot.identifiers()},
        )
        return self._snapshot

    @traced("secretwatch.watcher.poll_cycle")
    async def poll_once(self) -> bool:
        """Run one poll cycle.

        Failed fetches keep the cached value. If any secret parsed to a new
        value, the rotation callback is invoked once, after every secret has
        been checked, and polling stops.

        Returns:
            True if this cycle detected a rotation

        Raises:
            WatcherStateError: If the watcher is not polling
        """
        if self._state is not WatcherState.READY:
            raise WatcherStateError(
                f"Watcher '{self.name}' is not polling (state {self._state.value})",
                details={"state": self._state.value},
            )

        async with self._cycle_lock:
            if self._state is not WatcherState.READY:
                return False

            self._cycles += 1
            set_watch_context(watcher=self.name, poll_cycle=self._cycles)

            rotated: List[str] = []
            for secret in self._secrets:
                if secret.is_overridden:
                    continue
                outcome = await self._retrieve(secret)
                if self._state is not WatcherState.READY:
                    break
                if not outcome.ok:
                    logger.warning(
                        "Keeping cached credential for %s, fetch failed (%s)",
                        secret.store_key,
                        outcome.describe(),
                    )
                    continue
                if secret.record(outcome.value):
                    rotated.append(secret.store_key)
                    self._snapshot._update(secret.name, outcome.value)

            if self._state is not WatcherState.READY:
                logger.debug("Watcher %s stopped during a poll cycle", self.name)
                return False

            self._metrics.record_cycle()
            if not rotated:
                logger.debug("No secret rotation detected")
                return False

            self._state = WatcherState.ROTATION_DETECTED
            self._cancel_pending()
            self._metrics.record_rotation()
            logger.warning("Detected rotation of %s, signalling restart", ", ".join(rotated))
            await self._signal_rotation()
            return True

    def stop(self) -> None:
        """Cancel polling, including a cycle that is in flight.

        Once stopped, the rotation callback never fires. Safe to call more
        than once.
        """
        self._cancel_pending()
        if self._state in (WatcherState.UNINITIALIZED, WatcherState.READY):
            if self._running is not None:
                self._running.cancel()
                self._running = None
            self._state = WatcherState.STOPPED
            logger.info("Stopped watcher %s", self.name)

    async def _retrieve(self, secret: TrackedSecret) -> RetrievalOutcome:
        try:
            raw = await self._store.fetch(secret.store_key)
        except SecretNotFoundError as exc:
            outcome = RetrievalOutcome.failure(secret.store_key, FailureReason.EMPTY, exc)
        except Exception as exc:
            outcome = RetrievalOutcome.failure(secret.store_key, FailureReason.STORE_ERROR, exc)
        else:
            if not raw or not raw.strip():
                outcome = RetrievalOutcome.failure(secret.store_key, FailureReason.EMPTY)
            else:
                try:
                    outcome = RetrievalOutcome.success(secret.store_key, secret.parse(raw))
                except Exception as exc:
                    outcome = RetrievalOutcome.failure(secret.store_key, FailureReason.MALFORMED, exc)

        if not outcome.ok:
            self._metrics.record_fetch_failure(secret.store_key, outcome.reason.value)
        return outcome

    async def _signal_rotation(self) -> None:
        result = self._on_rotation()
        if inspect.isawaitable(result):
            await result

    def _schedule_next(self) -> None:
        self._pending = self._timer.schedule(self._poll_interval, self._run_scheduled_cycle)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def _run_scheduled_cycle(self) -> None:
        self._running, self._pending = self._pending, None
        if self._state is not WatcherState.READY:
            self._running = None
            return
        try:
            await self.poll_once()
        finally:
            self._running = None
            if self._state is WatcherState.READY and self._pending is None:
                self._schedule_next()
