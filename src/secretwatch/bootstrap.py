"""Application wiring for the Confluent credential watcher.

Typical use from an adapter's entry point::

    settings = get_settings()
    restart = make_restart_callback(
        app.stop, exit_delay_seconds=settings.watcher.restart_exit_delay_seconds
    )
    watcher = await start_credential_watch(restart, settings)
    if watcher is not None:
        producer = Producer(build_kafka_config(watcher.snapshot, settings.kafka))

The watcher never restarts anything itself. The restart callback stops the
application and exits the process, and the orchestrator starts a fresh one
which loads the rotated credentials.
"""

import asyncio
import inspect
import sys
from typing import Any, Callable, Optional, Set

from secretwatch.logging import get_logger
from secretwatch.protocols.providers import SecretStore, Timer
from secretwatch.settings import _Settings, get_settings
from secretwatch.watcher import RotationCallback, RotationWatcher, create_confluent_watcher

logger = get_logger(__name__)

_background_tasks: Set[asyncio.Task] = set()


async def start_credential_watch(
    on_rotation: RotationCallback,
    settings: Optional[_Settings] = None,
    store: Optional[SecretStore] = None,
    timer: Optional[Timer] = None,
) -> Optional[RotationWatcher]:
    """Load the Confluent credentials and start watching them for rotation.

    Args:
        on_rotation: Callback invoked once when a credential is rotated
        settings: Application settings, ``get_settings()`` by default
        store: Secret store, ``settings.secret_store`` by default
        timer: Poll scheduler, the asyncio event loop by default

    Returns:
        The started watcher, or None when Confluent config is not in use
        (``IS_LOCAL``) or ``SECRET_WATCHER_ENABLED`` is false

    Raises:
        InvalidCredentialError: If a credential cannot be loaded. The
            application must not start in that case.
    """
    settings = settings or get_settings()
    if not settings.features.should_watch_secrets:
        logger.info("Credential watching disabled", extra={"features": settings.features.get_feature_status()})
        return None

    watcher = create_confluent_watcher(
        settings.watcher,
        store or settings.secret_store,
        timer=timer,
    )
    await watcher.start(on_rotation)
    return watcher


def make_restart_callback(
    stop_app: Callable[[], Any],
    *,
    exit_delay_seconds: float = 10.0,
    exit_code: int = 1,
    exit_func: Callable[[int], Any] = sys.exit,
) -> Callable[[], None]:
    """Build a rotation callback that restarts the process.

    The callback calls ``stop_app`` without waiting for it (a returned
    awaitable runs as a background task) and exits the process with
    ``exit_code`` after ``exit_delay_seconds``, whether or not the
    application finished stopping. Must be invoked on a running event loop.
    """

    def restart() -> None:
        logger.warning("Restarting application to reload Kafka keys")
        loop = asyncio.get_running_loop()

        result = stop_app()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            _background_tasks.add(task)
            task.add_done_callback(_background_tasks.discard)

        loop.call_later(exit_delay_seconds, exit_func, exit_code)

    return restart
