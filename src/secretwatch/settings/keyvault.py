"""Key Vault configuration settings.

This module contains only the configuration settings for Azure Key Vault.
The actual secret retrieval implementation lives in the secret_vault
package.
"""

from typing import Optional
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict

from .base import SecretWatchBaseSettings


class KeyVaultSettings(SecretWatchBaseSettings):
    """Configuration settings for Azure Key Vault integration.

    The vault can be given either as a full ``url`` or as a vault ``name``,
    in which case the public-cloud URL is derived from it.

    Note: Retry settings (max_retries, retry_delay_seconds) are inherited
    from SecretWatchBaseSettings and read as KEYVAULT_MAX_RETRIES and
    KEYVAULT_RETRY_DELAY_SECONDS.
    """

    model_config = SettingsConfigDict(
        env_prefix="KEYVAULT_",
        case_sensitive=False
    )

    url: Optional[str] = Field(
        None,
        description="Azure Key Vault URL (https://vault-name.vault.azure.net/)"
    )
    name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("KEYVAULT_NAME", "KEY_VAULT"),
        description="Key Vault name, used to derive the URL when url is not set"
    )
    use_keyvault: bool = Field(
        default=True,
        description="Whether to use Key Vault for secrets"
    )

    tenant_id: Optional[str] = Field(
        None,
        description="Azure AD tenant ID for client secret authentication"
    )
    client_id: Optional[str] = Field(
        None,
        description="Azure client ID for Key Vault authentication"
    )
    client_secret: Optional[SecretStr] = Field(
        None,
        description="Azure client secret for Key Vault authentication"
    )

    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single secret fetch attempt"
    )

    @property
    def vault_url(self) -> Optional[str]:
        """Resolved vault URL, or None when neither url nor name is set."""
        if self.url:
            return self.url
        if self.name:
            return f"https://{self.name}.vault.azure.net"
        return None

    @property
    def has_client_credentials(self) -> bool:
        """True when a service principal is configured explicitly."""
        return bool(self.tenant_id and self.client_id and self.client_secret)

    @property
    def is_configured(self) -> bool:
        """Check if Key Vault is properly configured.

        Returns:
            True if a vault URL can be resolved and use_keyvault is enabled
        """
        return bool(self.use_keyvault and self.vault_url)
