import pytest

from secretwatch.settings import WatcherSettings
from secretwatch.types import CredentialValue
from secretwatch.watcher import (
    BROKER,
    SCHEMA_REGISTRY,
    WatcherState,
    confluent_tracked_secrets,
    create_confluent_watcher,
)


def test_tracks_broker_then_schema_registry():
    secrets = confluent_tracked_secrets(WatcherSettings())

    assert [(s.name, s.store_key) for s in secrets] == [
        (BROKER, "realtime-confluent-key"),
        (SCHEMA_REGISTRY, "realtime-schema-registry-key"),
    ]
    assert not any(s.is_overridden for s in secrets)


def test_local_overrides_become_preloaded_values():
    settings = WatcherSettings(local_confluent_key="lk", local_confluent_secret="ls")

    broker, registry = confluent_tracked_secrets(settings)

    assert broker.preloaded_value == CredentialValue(key="lk", secret="ls")
    assert not registry.is_overridden


def test_watcher_uses_configured_interval(store, timer):
    watcher = create_confluent_watcher(WatcherSettings(interval_minutes=2), store, timer=timer)

    assert watcher.poll_interval_seconds == 120
    assert watcher.name == "confluent"
    assert watcher.state is WatcherState.UNINITIALIZED


@pytest.mark.asyncio
async def test_end_to_end_rotation(store, timer, rotations):
    watcher = create_confluent_watcher(WatcherSettings(), store, timer=timer)
    snapshot = await watcher.start(rotations)
    assert snapshot.identifiers() == {BROKER: "broker-key-1", SCHEMA_REGISTRY: "registry-key-1"}

    await timer.advance(300)
    assert rotations.count == 0

    store.set_credential("realtime-confluent-key", "broker-key-2", "broker-secret-2")
    await timer.advance(300)
    assert rotations.count == 1

    await timer.advance(3000)
    assert rotations.count == 1


@pytest.mark.asyncio
async def test_overridden_secret_skips_store(store, timer, rotations):
    settings = WatcherSettings(local_schema_registry_key="lk", local_schema_registry_secret="ls")
    watcher = create_confluent_watcher(settings, store, timer=timer)

    snapshot = await watcher.start(rotations)

    assert snapshot[SCHEMA_REGISTRY].key == "lk"
    assert store.calls == ["realtime-confluent-key"]
