"""Confluent credential wiring.

Tracks the two Confluent Cloud credentials a streaming adapter needs: the
Kafka broker API key and the schema registry API key.
"""

from typing import List, Optional

from pydantic import SecretStr

from secretwatch.monitoring.metrics import WatcherMetrics
from secretwatch.protocols.providers import SecretStore, Timer
from secretwatch.settings.watcher import WatcherSettings
from secretwatch.types.credentials import CredentialValue
from .rotation import RotationWatcher
from .tracked import TrackedSecret

BROKER = "broker"
SCHEMA_REGISTRY = "schema_registry"


def _local_override(key: Optional[str], secret: Optional[SecretStr]) -> Optional[CredentialValue]:
    if not key or secret is None:
        return None
    return CredentialValue(key=key, secret=secret)


def confluent_tracked_secrets(settings: WatcherSettings) -> List[TrackedSecret]:
    """Build the broker and schema registry tracked secrets, in that order.

    ``LOCAL_CONFLUENT_KEY``/``LOCAL_CONFLUENT_SECRET`` (and the schema
    registry pair) preload a credential so it is never read from the store.
    """
    return [
        TrackedSecret(
            name=BROKER,
            store_key=settings.confluent_key_name,
            preloaded_value=_local_override(settings.local_confluent_key, settings.local_confluent_secret),
        ),
        TrackedSecret(
            name=SCHEMA_REGISTRY,
            store_key=settings.schema_registry_key_name,
            preloaded_value=_local_override(
                settings.local_schema_registry_key, settings.local_schema_registry_secret
            ),
        ),
    ]


def create_confluent_watcher(
    watcher_settings: WatcherSettings,
    store: SecretStore,
    *,
    timer: Optional[Timer] = None,
    metrics: Optional[WatcherMetrics] = None,
) -> RotationWatcher:
    """Create an unstarted watcher for the Confluent credentials."""
    return RotationWatcher(
        store,
        confluent_tracked_secrets(watcher_settings),
        poll_interval_seconds=watcher_settings.poll_interval_seconds,
        timer=timer,
        metrics=metrics,
        name="confluent",
    )
