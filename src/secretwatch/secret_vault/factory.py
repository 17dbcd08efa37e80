"""Factory for creating secret stores.

This module provides factory functions for creating the appropriate
secret store based on configuration and environment.
"""

from typing import Optional, Dict, TYPE_CHECKING
import os

from secretwatch.logging import get_logger
from secretwatch.protocols.providers import SecretStore
from .keyvault import KeyVaultSecretStore
from .mock import InMemorySecretStore

if TYPE_CHECKING:
    from secretwatch.settings.keyvault import KeyVaultSettings


logger = get_logger(__name__)


def is_test_mode() -> bool:
    """Check if the application is running in test mode.

    Returns:
        True if SECRETWATCH_TEST_MODE="true" (case-insensitive), False otherwise
    """
    return os.getenv("SECRETWATCH_TEST_MODE", "").lower() == "true"


def create_secret_store(
    keyvault_settings: Optional['KeyVaultSettings'] = None,
    mock_values: Optional[Dict[str, str]] = None,
    force_mock: bool = False
) -> SecretStore:
    """Create the appropriate secret store based on configuration.

    Args:
        keyvault_settings: Optional Key Vault configuration settings
        mock_values: Optional dictionary of in-memory secret values
        force_mock: If True, always create an in-memory store

    Returns:
        SecretStore implementation (KeyVaultSecretStore or InMemorySecretStore)

    Example:
        >>> from secretwatch.settings.keyvault import KeyVaultSettings
        >>> from secretwatch.secret_vault import create_secret_store
        >>>
        >>> # Production: Use Key Vault
        >>> store = create_secret_store(KeyVaultSettings(name="kv-ae-realtime-d01"))
        >>>
        >>> # Testing: Use in-memory values
        >>> store = create_secret_store(mock_values={"realtime-confluent-key": "..."}, force_mock=True)
    """
    use_mock = force_mock or is_test_mode()

    if not use_mock and keyvault_settings is not None and keyvault_settings.is_configured:
        logger.debug("Creating Key Vault secret store for %s", keyvault_settings.vault_url)
        return KeyVaultSecretStore(keyvault_settings)

    logger.info("Using in-memory secret store")
    return InMemorySecretStore(mock_values)
