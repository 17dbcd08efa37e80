"""Secret store package.

This package provides implementations of the SecretStore protocol, allowing
Azure Key Vault and an in-memory store to be used interchangeably by the
rotation watcher.
"""

from secretwatch.protocols.providers import SecretStore
from .factory import create_secret_store, is_test_mode
from .keyvault import KeyVaultSecretStore
from .mock import InMemorySecretStore

__all__ = [
    "SecretStore",
    "KeyVaultSecretStore",
    "InMemorySecretStore",
    "create_secret_store",
    "is_test_mode",
]
