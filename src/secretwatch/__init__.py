from secretwatch.__version__ import __version__

from secretwatch.bootstrap import make_restart_callback, start_credential_watch
from secretwatch.common.exceptions import (
    CredentialParseError,
    ErrorCode,
    InvalidCredentialError,
    SecretNotFoundError,
    SecretStoreError,
    SecretWatchError,
    WatcherStateError,
)
from secretwatch.secret_vault import InMemorySecretStore, KeyVaultSecretStore, create_secret_store
from secretwatch.streaming import build_kafka_config, build_schema_registry_config
from secretwatch.types import CredentialSnapshot, CredentialValue
from secretwatch.watcher import (
    AsyncioTimer,
    ManualTimer,
    RotationWatcher,
    TrackedSecret,
    WatcherState,
    create_confluent_watcher,
)



__all__ = [
    "__version__",

    "RotationWatcher",
    "WatcherState",
    "TrackedSecret",
    "AsyncioTimer",
    "ManualTimer",
    "create_confluent_watcher",

    "CredentialValue",
    "CredentialSnapshot",

    "KeyVaultSecretStore",
    "InMemorySecretStore",
    "create_secret_store",

    "build_kafka_config",
    "build_schema_registry_config",

    "start_credential_watch",
    "make_restart_callback",

    # Exceptions (public API)
    "SecretWatchError",
    "ErrorCode",
    "SecretStoreError",
    "SecretNotFoundError",
    "CredentialParseError",
    "InvalidCredentialError",
    "WatcherStateError",
]
