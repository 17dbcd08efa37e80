"""Rotation watcher settings.

Environment variable names match the ones the deployed adapters already
use, e.g. ``SECRET_WATCHER_INTERVAL`` (minutes) and
``KEY_VAULT_SECRET_NAME_CONFLUENT_KEY``.
"""

from typing import Optional

from pydantic import AliasChoices, Field, SecretStr, model_validator

from .base import SecretWatchBaseSettings

CONFLUENT_KEY_NAME = "realtime-confluent-key"
SCHEMA_REGISTRY_KEY_NAME = "realtime-schema-registry-key"


class WatcherSettings(SecretWatchBaseSettings):
    """Settings for the Confluent credential rotation watcher."""

    confluent_key_name: str = Field(
        default=CONFLUENT_KEY_NAME,
        min_length=1,
        validation_alias=AliasChoices("KEY_VAULT_SECRET_NAME_CONFLUENT_KEY", "confluent_key_name"),
        description="Key Vault secret holding the Kafka broker API key/secret"
    )
    schema_registry_key_name: str = Field(
        default=SCHEMA_REGISTRY_KEY_NAME,
        min_length=1,
        validation_alias=AliasChoices("KEY_VAULT_SECRET_NAME_SCHEMA_REGISTRY_KEY", "schema_registry_key_name"),
        description="Key Vault secret holding the schema registry API key/secret"
    )
    interval_minutes: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("SECRET_WATCHER_INTERVAL", "interval_minutes"),
        description="Minutes between two rotation checks"
    )
    restart_exit_delay_seconds: float = Field(
        default=10.0,
        ge=0,
        validation_alias=AliasChoices("SECRET_WATCHER_EXIT_DELAY", "restart_exit_delay_seconds"),
        description="Grace period between stopping the app and exiting the process after a rotation"
    )

    local_confluent_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("LOCAL_CONFLUENT_KEY", "local_confluent_key"),
        description="Local development broker key; skips Key Vault for the broker credential"
    )
    local_confluent_secret: Optional[SecretStr] = Field(
        None,
        validation_alias=AliasChoices("LOCAL_CONFLUENT_SECRET", "local_confluent_secret"),
    )
    local_schema_registry_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("LOCAL_SCHEMA_REGISTRY_KEY", "local_schema_registry_key"),
        description="Local development schema registry key; skips Key Vault for that credential"
    )
    local_schema_registry_secret: Optional[SecretStr] = Field(
        None,
        validation_alias=AliasChoices("LOCAL_SCHEMA_REGISTRY_SECRET", "local_schema_registry_secret"),
    )

    @model_validator(mode='after')
    def validate_local_overrides(self) -> 'WatcherSettings':
        """A local override needs both its key and its secret."""
        pairs = {
            "LOCAL_CONFLUENT": (self.local_confluent_key, self.local_confluent_secret),
            "LOCAL_SCHEMA_REGISTRY": (self.local_schema_registry_key, self.local_schema_registry_secret),
        }
        for prefix, (key, secret) in pairs.items():
            if bool(key) != bool(secret and secret.get_secret_value()):
                raise ValueError(f"{prefix}_KEY and {prefix}_SECRET must be set together")
        return self

    @property
    def poll_interval_seconds(self) -> float:
        return self.interval_minutes * 60
