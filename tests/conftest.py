"""Shared fixtures for secretwatch tests."""

import json

import pytest

from secretwatch.secret_vault import InMemorySecretStore
from secretwatch.settings import CONFLUENT_KEY_NAME, SCHEMA_REGISTRY_KEY_NAME
from secretwatch.watcher import ManualTimer

_ENV_VARS = (
    "KEY_VAULT",
    "KEYVAULT_NAME",
    "KEYVAULT_URL",
    "KEYVAULT_USE_KEYVAULT",
    "KEYVAULT_TENANT_ID",
    "KEYVAULT_CLIENT_ID",
    "KEYVAULT_CLIENT_SECRET",
    "KEY_VAULT_SECRET_NAME_CONFLUENT_KEY",
    "KEY_VAULT_SECRET_NAME_SCHEMA_REGISTRY_KEY",
    "SECRET_WATCHER_INTERVAL",
    "SECRET_WATCHER_EXIT_DELAY",
    "SECRET_WATCHER_ENABLED",
    "LOCAL_CONFLUENT_KEY",
    "LOCAL_CONFLUENT_SECRET",
    "LOCAL_SCHEMA_REGISTRY_KEY",
    "LOCAL_SCHEMA_REGISTRY_SECRET",
    "IS_LOCAL",
    "KAFKA_HOSTS",
    "SCHEMA_REGISTRY_URL",
    "USE_SCHEMA_REGISTRY_PRODUCER",
    "SECRETWATCH_TEST_MODE",
)


def credential_json(key: str, secret: str) -> str:
    return json.dumps({"key": key, "secret": secret})


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from deployment environment variables."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store() -> InMemorySecretStore:
    return InMemorySecretStore({
        CONFLUENT_KEY_NAME: credential_json("broker-key-1", "broker-secret-1"),
        SCHEMA_REGISTRY_KEY_NAME: credential_json("registry-key-1", "registry-secret-1"),
    })


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def rotations():
    """Rotation callback that records each invocation."""

    class _Recorder:
        def __init__(self):
            self.count = 0

        def __call__(self):
            self.count += 1

    return _Recorder()
