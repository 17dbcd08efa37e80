"""Tests for RotationWatcher driven by a virtual-time timer."""

import asyncio
import json

import pytest

from secretwatch.common.exceptions import InvalidCredentialError, SecretStoreError, WatcherStateError
from secretwatch.secret_vault import InMemorySecretStore
from secretwatch.settings import CONFLUENT_KEY_NAME, SCHEMA_REGISTRY_KEY_NAME
from secretwatch.types import CredentialValue
from secretwatch.watcher import AsyncioTimer, RotationWatcher, TrackedSecret, WatcherState

INTERVAL = 300.0


def _payload(key: str, secret: str) -> str:
    return json.dumps({"key": key, "secret": secret})


def _tracked():
    return [
        TrackedSecret(name="broker", store_key=CONFLUENT_KEY_NAME),
        TrackedSecret(name="schema_registry", store_key=SCHEMA_REGISTRY_KEY_NAME),
    ]


class _GatedStore:
    """Store wrapper whose fetches block on ``gate`` once it is set."""

    def __init__(self, inner: InMemorySecretStore):
        self.inner = inner
        self.gate = None
        self.entered = asyncio.Event()

    async def fetch(self, key: str) -> str:
        if self.gate is not None:
            self.entered.set()
            await self.gate.wait()
        return await self.inner.fetch(key)

    async def close(self) -> None:
        await self.inner.close()


@pytest.fixture
def watcher(store, timer):
    return RotationWatcher(store, _tracked(), poll_interval_seconds=INTERVAL, timer=timer, name="test")


class TestConstruction:
    def test_requires_tracked_secrets(self, store):
        with pytest.raises(ValueError):
            RotationWatcher(store, [])

    def test_requires_unique_names(self, store):
        secrets = [
            TrackedSecret(name="broker", store_key="a"),
            TrackedSecret(name="broker", store_key="b"),
        ]
        with pytest.raises(ValueError):
            RotationWatcher(store, secrets)

    @pytest.mark.parametrize("interval", [0, -1])
    def test_requires_positive_interval(self, store, interval):
        with pytest.raises(ValueError):
            RotationWatcher(store, _tracked(), poll_interval_seconds=interval)

    def test_starts_uninitialized(self, watcher):
        assert watcher.state is WatcherState.UNINITIALIZED
        assert not watcher.is_polling
        assert len(watcher.snapshot) == 0


class TestStart:
    @pytest.mark.asyncio
    async def test_loads_all_secrets_and_schedules_first_cycle(self, watcher, store, timer, rotations):
        snapshot = await watcher.start(rotations)

        assert watcher.state is WatcherState.READY
        assert snapshot["broker"] == CredentialValue(key="broker-key-1", secret="broker-secret-1")
        assert snapshot["schema_registry"].key == "registry-key-1"
        assert store.calls == [CONFLUENT_KEY_NAME, SCHEMA_REGISTRY_KEY_NAME]
        assert [task.due for task in timer.pending] == [INTERVAL]
        assert rotations.count == 0

    @pytest.mark.asyncio
    async def test_missing_secret_fails_with_its_key(self, store, timer, rotations):
        store.remove_secret(SCHEMA_REGISTRY_KEY_NAME)
        watcher = RotationWatcher(store, _tracked(), timer=timer)

        with pytest.raises(InvalidCredentialError) as exc_info:
            await watcher.start(rotations)

        assert exc_info.value.store_key == SCHEMA_REGISTRY_KEY_NAME
        assert exc_info.value.reason.startswith("empty")
        assert watcher.state is WatcherState.FAILED
        assert timer.pending == []
        assert len(watcher.snapshot) == 0
        assert rotations.count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw, reason",
        [
            ("", "empty"),
            ("   ", "empty"),
            ("not json", "malformed"),
            ('{"key": "a"}', "malformed"),
        ],
    )
    async def test_unusable_value_fails_start(self, store, timer, rotations, raw, reason):
        store.set_secret(CONFLUENT_KEY_NAME, raw)
        watcher = RotationWatcher(store, _tracked(), timer=timer)

        with pytest.raises(InvalidCredentialError) as exc_info:
            await watcher.start(rotations)

        assert exc_info.value.store_key == CONFLUENT_KEY_NAME
        assert exc_info.value.reason.startswith(reason)
        assert timer.pending == []

    @pytest.mark.asyncio
    async def test_store_error_fails_start(self, store, timer, rotations):
        store.fail_next(SecretStoreError("vault unreachable"))
        watcher = RotationWatcher(store, _tracked(), timer=timer)

        with pytest.raises(InvalidCredentialError) as exc_info:
            await watcher.start(rotations)

        assert exc_info.value.store_key == CONFLUENT_KEY_NAME
        assert exc_info.value.reason.startswith("store_error")
        assert isinstance(exc_info.value.__cause__, SecretStoreError)

    @pytest.mark.asyncio
    async def test_parser_error_is_malformed(self, store, timer, rotations):
        def parser(raw):
            return CredentialValue(**json.loads(raw)["credential"])

        secrets = [TrackedSecret(name="broker", store_key=CONFLUENT_KEY_NAME, parser=parser)]
        watcher = RotationWatcher(store, secrets, timer=timer)

        with pytest.raises(InvalidCredentialError) as exc_info:
            await watcher.start(rotations)

        assert exc_info.value.store_key == CONFLUENT_KEY_NAME
        assert exc_info.value.reason.startswith("malformed")
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert watcher.state is WatcherState.FAILED

    @pytest.mark.asyncio
    async def test_cannot_start_twice(self, watcher, rotations):
        await watcher.start(rotations)

        with pytest.raises(WatcherStateError):
            await watcher.start(rotations)

    @pytest.mark.asyncio
    async def test_cannot_restart_after_failure(self, store, timer, rotations):
        store.remove_secret(CONFLUENT_KEY_NAME)
        watcher = RotationWatcher(store, _tracked(), timer=timer)
        with pytest.raises(InvalidCredentialError):
            await watcher.start(rotations)

        store.set_secret(CONFLUENT_KEY_NAME, _payload("a", "b"))
        with pytest.raises(WatcherStateError):
            await watcher.start(rotations)


class TestPolling:
    @pytest.mark.asyncio
    async def test_rotation_fires_callback_once_and_stops_polling(self, watcher, store, timer, rotations):
        await watcher.start(rotations)

        assert await timer.advance(INTERVAL) == 1
        assert rotations.count == 0

        store.set_secret(CONFLUENT_KEY_NAME, _payload("broker-key-2", "broker-secret-2"))
        await timer.advance(INTERVAL)

        assert rotations.count == 1
        assert watcher.state is WatcherState.ROTATION_DETECTED
        assert watcher.snapshot["broker"].key == "broker-key-2"
        assert timer.pending == []

        calls_after_rotation = len(store.calls)
        assert await timer.advance(10 * INTERVAL) == 0
        assert rotations.count == 1
        assert len(store.calls) == calls_after_rotation

    @pytest.mark.asyncio
    async def test_unchanged_values_never_fire(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        # same credential, different serialization
        store.set_secret(CONFLUENT_KEY_NAME, '{"secret": "broker-secret-1", "key": "broker-key-1"}')

        assert await timer.advance(5 * INTERVAL) == 5
        assert rotations.count == 0
        assert watcher.state is WatcherState.READY
        assert watcher.metrics.stats.poll_cycles == 5

    @pytest.mark.asyncio
    async def test_secret_only_rotation_is_detected(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        store.set_secret(SCHEMA_REGISTRY_KEY_NAME, _payload("registry-key-1", "registry-secret-2"))

        assert await watcher.poll_once() is True
        assert rotations.count == 1

    @pytest.mark.asyncio
    async def test_both_rotated_in_one_cycle_fires_once(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")
        store.set_credential(SCHEMA_REGISTRY_KEY_NAME, "registry-key-2", "s")

        await timer.advance(INTERVAL)

        assert rotations.count == 1
        assert watcher.snapshot.identifiers() == {
            "broker": "broker-key-2",
            "schema_registry": "registry-key-2",
        }

    @pytest.mark.asyncio
    async def test_transient_failures_keep_cached_value(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        cached = watcher.snapshot["broker"]

        store.fail_next()
        await timer.advance(INTERVAL)
        store.set_secret(CONFLUENT_KEY_NAME, "not json")
        await timer.advance(INTERVAL)
        store.set_secret(CONFLUENT_KEY_NAME, "")
        await timer.advance(INTERVAL)

        assert rotations.count == 0
        assert watcher.state is WatcherState.READY
        assert watcher.snapshot["broker"] == cached
        assert watcher.is_polling
        assert watcher.metrics.stats.fetch_failures[CONFLUENT_KEY_NAME] == 3

    @pytest.mark.asyncio
    async def test_parser_error_keeps_cached_value(self, store, timer, rotations):
        def parser(raw):
            payload = json.loads(raw)
            return CredentialValue(key=payload["key"], secret=payload["secret"])

        secrets = [TrackedSecret(name="broker", store_key=CONFLUENT_KEY_NAME, parser=parser)]
        watcher = RotationWatcher(store, secrets, poll_interval_seconds=INTERVAL, timer=timer)
        await watcher.start(rotations)
        cached = watcher.snapshot["broker"]

        store.set_secret(CONFLUENT_KEY_NAME, json.dumps({"key": "broker-key-2"}))
        await timer.advance(INTERVAL)

        assert rotations.count == 0
        assert watcher.state is WatcherState.READY
        assert watcher.snapshot["broker"] == cached
        assert watcher.metrics.stats.poll_cycles == 1
        assert watcher.metrics.stats.fetch_failures[CONFLUENT_KEY_NAME] == 1
        assert watcher.is_polling

    @pytest.mark.asyncio
    async def test_rotation_after_failures_is_detected(self, watcher, store, timer, rotations):
        await watcher.start(rotations)

        store.remove_secret(CONFLUENT_KEY_NAME)
        await timer.advance(INTERVAL)
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "broker-secret-2")
        await timer.advance(INTERVAL)

        assert rotations.count == 1

    @pytest.mark.asyncio
    async def test_value_restored_after_failure_is_not_a_rotation(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        original = store.values[CONFLUENT_KEY_NAME]

        store.set_secret(CONFLUENT_KEY_NAME, "not json")
        await timer.advance(INTERVAL)
        store.set_secret(CONFLUENT_KEY_NAME, original)
        await timer.advance(INTERVAL)

        assert rotations.count == 0

    @pytest.mark.asyncio
    async def test_secrets_checked_in_declared_order(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        store.calls.clear()

        await timer.advance(INTERVAL)

        assert store.calls == [CONFLUENT_KEY_NAME, SCHEMA_REGISTRY_KEY_NAME]

    @pytest.mark.asyncio
    async def test_cycles_never_overlap(self, watcher, store, timer, rotations):
        await watcher.start(rotations)

        await timer.advance(INTERVAL / 2)
        assert len(timer.pending) == 1
        await timer.advance(INTERVAL / 2)
        assert len(timer.pending) == 1
        assert timer.pending[0].due == 2 * INTERVAL

    @pytest.mark.asyncio
    async def test_concurrent_manual_polls_fire_once(self, watcher, store, rotations):
        await watcher.start(rotations)
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")

        results = await asyncio.gather(watcher.poll_once(), watcher.poll_once(), return_exceptions=True)

        assert rotations.count == 1
        assert results.count(True) == 1

    @pytest.mark.asyncio
    async def test_async_callback_is_awaited(self, watcher, store, timer):
        signalled = asyncio.Event()

        async def on_rotation():
            signalled.set()

        await watcher.start(on_rotation)
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")
        await timer.advance(INTERVAL)

        assert signalled.is_set()

    @pytest.mark.asyncio
    async def test_poll_before_start_is_rejected(self, watcher):
        with pytest.raises(WatcherStateError):
            await watcher.poll_once()


class TestPreloadedValues:
    @pytest.mark.asyncio
    async def test_preloaded_secret_is_never_fetched(self, store, timer, rotations):
        local = CredentialValue(key="local-key", secret="local-secret")
        secrets = [
            TrackedSecret(name="broker", store_key=CONFLUENT_KEY_NAME, preloaded_value=local),
            TrackedSecret(name="schema_registry", store_key=SCHEMA_REGISTRY_KEY_NAME),
        ]
        store.remove_secret(CONFLUENT_KEY_NAME)
        watcher = RotationWatcher(store, secrets, poll_interval_seconds=INTERVAL, timer=timer)

        snapshot = await watcher.start(rotations)
        await timer.advance(3 * INTERVAL)

        assert snapshot["broker"] == local
        assert store.calls_for(CONFLUENT_KEY_NAME) == 0
        assert store.calls_for(SCHEMA_REGISTRY_KEY_NAME) == 4
        assert rotations.count == 0

    @pytest.mark.asyncio
    async def test_all_preloaded_never_touches_store(self, timer, rotations):
        store = InMemorySecretStore({})
        secrets = [
            TrackedSecret(
                name="broker",
                store_key=CONFLUENT_KEY_NAME,
                preloaded_value=CredentialValue(key="a", secret="b"),
            ),
        ]
        watcher = RotationWatcher(store, secrets, poll_interval_seconds=INTERVAL, timer=timer)

        await watcher.start(rotations)
        await timer.advance(3 * INTERVAL)

        assert store.calls == []
        assert rotations.count == 0


class TestStop:
    @pytest.mark.asyncio
    async def test_stop_cancels_polling(self, watcher, store, timer, rotations):
        await watcher.start(rotations)
        fetched = len(store.calls)

        watcher.stop()
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")
        await timer.advance(5 * INTERVAL)

        assert watcher.state is WatcherState.STOPPED
        assert not watcher.is_polling
        assert len(store.calls) == fetched
        assert rotations.count == 0

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, watcher, rotations):
        await watcher.start(rotations)

        watcher.stop()
        watcher.stop()

        assert watcher.state is WatcherState.STOPPED

    @pytest.mark.asyncio
    async def test_poll_after_stop_is_rejected(self, watcher, rotations):
        await watcher.start(rotations)
        watcher.stop()

        with pytest.raises(WatcherStateError):
            await watcher.poll_once()

    @pytest.mark.asyncio
    async def test_stop_during_cycle_never_fires(self, store, timer, rotations):
        gated = _GatedStore(store)
        watcher = RotationWatcher(gated, _tracked(), poll_interval_seconds=INTERVAL, timer=timer)
        await watcher.start(rotations)

        gated.gate = asyncio.Event()
        cycle = asyncio.create_task(timer.advance(INTERVAL))
        await asyncio.wait_for(gated.entered.wait(), 1)
        assert watcher.is_polling

        watcher.stop()
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")
        gated.gate.set()
        await cycle

        assert rotations.count == 0
        assert watcher.state is WatcherState.STOPPED
        assert watcher.snapshot["broker"].key == "broker-key-1"
        assert not watcher.is_polling
        assert timer.pending == []

    @pytest.mark.asyncio
    async def test_stop_cancels_running_cycle_on_event_loop(self, store, rotations):
        gated = _GatedStore(store)
        watcher = RotationWatcher(gated, _tracked(), poll_interval_seconds=0.01, timer=AsyncioTimer())
        await watcher.start(rotations)

        gated.gate = asyncio.Event()
        await asyncio.wait_for(gated.entered.wait(), 1)

        watcher.stop()
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")
        gated.gate.set()
        await asyncio.sleep(0.05)

        assert rotations.count == 0
        assert watcher.state is WatcherState.STOPPED
        assert watcher.snapshot["broker"].key == "broker-key-1"
        assert not watcher.is_polling

    @pytest.mark.asyncio
    async def test_stop_after_rotation_keeps_state(self, watcher, store, rotations):
        await watcher.start(rotations)
        store.set_credential(CONFLUENT_KEY_NAME, "broker-key-2", "s")
        await watcher.poll_once()

        watcher.stop()

        assert watcher.state is WatcherState.ROTATION_DETECTED


@pytest.mark.asyncio
async def test_primary_rotation_scenario(timer, rotations):
    store = InMemorySecretStore({
        "primary-key": _payload("ABCDEF", "s1"),
        "secondary-key": _payload("ABCDEF", "s1"),
    })
    secrets = [
        TrackedSecret(name="primary", store_key="primary-key"),
        TrackedSecret(name="secondary", store_key="secondary-key"),
    ]
    watcher = RotationWatcher(store, secrets, poll_interval_seconds=60, timer=timer)

    snapshot = await watcher.start(rotations)
    expected = CredentialValue(key="ABCDEF", secret="s1")
    assert snapshot["primary"] == expected
    assert snapshot["secondary"] == expected

    await timer.advance(60)
    assert rotations.count == 0

    store.set_secret("primary-key", _payload("FEDCBA", "s2"))
    await timer.advance(60)
    assert rotations.count == 1
    assert snapshot["primary"].key == "FEDCBA"
    assert snapshot["secondary"] == expected

    assert await timer.advance(600) == 0
    assert rotations.count == 1
