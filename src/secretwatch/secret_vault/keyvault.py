"""Azure Key Vault secret store implementation.

This module provides the KeyVaultSecretStore class which implements the
SecretStore protocol on top of the asynchronous Azure SDK client.
"""

from typing import Optional, TYPE_CHECKING

from azure.core.exceptions import AzureError, ResourceNotFoundError

from secretwatch.common.exceptions import SecretNotFoundError, SecretStoreError
from secretwatch.logging import get_logger
from secretwatch.utils.decorators import retry_with_backoff, traced, with_timeout

if TYPE_CHECKING:
    from azure.keyvault.secrets.aio import SecretClient
    from secretwatch.settings.keyvault import KeyVaultSettings


logger = get_logger(__name__)


def _is_transient(exc: Exception) -> bool:
    return not isinstance(exc, SecretNotFoundError)


class KeyVaultSecretStore:
    """Azure Key Vault secret store.

    Every ``fetch`` reads the current version of the secret; nothing is
    cached here, since detecting rotation depends on seeing fresh values.
    Transient failures are retried with exponential backoff using the
    configured ``max_retries``/``retry_delay_seconds``. A missing or empty
    secret is reported immediately as ``SecretNotFoundError``.

    Attributes:
        kv_settings: Configuration settings for Key Vault
        _secret_client: Lazy-loaded Azure SecretClient instance
    """

    def __init__(self, settings: 'KeyVaultSettings', secret_client: Optional['SecretClient'] = None):
        """Initialize the Key Vault secret store.

        Args:
            settings: Key Vault configuration settings
            secret_client: Pre-built async SecretClient, mainly for tests
        """
        self.kv_settings = settings
        self._secret_client = secret_client
        self._credential = None

        fetch_once = with_timeout(settings.timeout_seconds, SecretStoreError)(self._fetch_once)
        self._fetch_with_retry = retry_with_backoff(
            max_retries=settings.max_retries,
            initial_delay=settings.retry_delay_seconds,
            retry_condition=_is_transient,
        )(fetch_once)

    @property
    def secret_client(self) -> 'SecretClient':
        """Get or create the async Key Vault secret client.

        Raises:
            SecretStoreError: If Key Vault is not configured
        """
        if self._secret_client is None:
            if not self.kv_settings.is_configured:
                raise SecretStoreError("Key Vault is not configured (set KEYVAULT_URL or KEYVAULT_NAME)")

            from azure.keyvault.secrets.aio import SecretClient
            from azure.identity.aio import ClientSecretCredential, DefaultAzureCredential

            # Use client credentials if provided
            if self.kv_settings.has_client_credentials:
                self._credential = ClientSecretCredential(
                    tenant_id=self.kv_settings.tenant_id,
                    client_id=self.kv_settings.client_id,
                    client_secret=self.kv_settings.client_secret.get_secret_value()
                )
            else:
                self._credential = DefaultAzureCredential()

            self._secret_client = SecretClient(
                vault_url=self.kv_settings.vault_url,
                credential=self._credential
            )

        return self._secret_client

    @traced("secretwatch.keyvault.fetch", attribute_getter=lambda self, key: {"secretwatch.store_key": key})
    async def fetch(self, key: str) -> str:
        """Retrieve the current value of a secret.

        Args:
            key: Name of the secret in Key Vault

        Returns:
            The secret value

        Raises:
            SecretNotFoundError: If the secret does not exist or has no value
            SecretStoreError: If Key Vault could not be reached after retries
        """
        return await self._fetch_with_retry(key)

    async def _fetch_once(self, key: str) -> str:
        try:
            secret = await self.secret_client.get_secret(key)
        except ResourceNotFoundError as exc:
            raise SecretNotFoundError(self._not_found_message(key), store_key=key, cause=exc) from exc
        except AzureError as exc:
            raise SecretStoreError(
                f"Failed to retrieve secret '{key}' from Azure Key Vault",
                store_key=key,
                cause=exc,
                is_retryable=True,
            ) from exc

        if secret is None or not secret.value:
            raise SecretNotFoundError(self._not_found_message(key), store_key=key)

        return secret.value

    @staticmethod
    def _not_found_message(key: str) -> str:
        return f"Could not find secret under secretName={key} from Azure Key Vault"

    async def close(self) -> None:
        """Close the SDK client and credential."""
        if self._secret_client is not None:
            await self._secret_client.close()
            self._secret_client = None
        if self._credential is not None:
            await self._credential.close()
            self._credential = None
        logger.debug("Closed Key Vault secret store")
