from typing import Optional, TYPE_CHECKING
from pydantic import Field

from .base import SecretWatchBaseSettings
from .features import FeatureSettings
from .kafka import KafkaSettings
from .keyvault import KeyVaultSettings
from .watcher import WatcherSettings
from secretwatch.logging import get_logger

if TYPE_CHECKING:
    from secretwatch.protocols.providers import SecretStore


logger = get_logger(__name__)


class _Settings(SecretWatchBaseSettings):
    """Aggregated application settings.

    Each domain section reads its own environment variables, so the usual
    deployment configuration (``KEY_VAULT``, ``IS_LOCAL``,
    ``SECRET_WATCHER_INTERVAL``, ``KAFKA_HOSTS`` ...) is picked up without
    nesting.
    """

    keyvault: KeyVaultSettings = Field(
        default_factory=KeyVaultSettings,
        description="Key Vault configuration"
    )
    watcher: WatcherSettings = Field(
        default_factory=WatcherSettings,
        description="Rotation watcher configuration"
    )
    features: FeatureSettings = Field(
        default_factory=FeatureSettings,
        description="Feature flags configuration"
    )
    kafka: KafkaSettings = Field(
        default_factory=KafkaSettings,
        description="Streaming client configuration"
    )

    _secret_store: Optional['SecretStore'] = None

    @property
    def secret_store(self) -> 'SecretStore':
        """Get the secret store with lazy creation.

        Key Vault is used when configured; otherwise (and in test mode) an
        in-memory store is returned.
        """
        if self._secret_store is None:
            from secretwatch.secret_vault import create_secret_store
            self._secret_store = create_secret_store(self.keyvault)
        return self._secret_store


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()
        logger.debug("Loaded settings", extra={"features": _settings.features.get_feature_status()})

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
