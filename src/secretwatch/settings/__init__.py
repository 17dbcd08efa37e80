"""Settings module providing configuration management for secretwatch.

Built on Pydantic Settings, organized by domain:

    - base.py: SecretWatchBaseSettings with shared config and retry settings
    - keyvault.py: Azure Key Vault connection (KEYVAULT_ prefix, KEY_VAULT)
    - watcher.py: secret names, poll interval and local overrides
    - features.py: IS_LOCAL and SECRET_WATCHER_ENABLED flags
    - kafka.py: streaming client connection settings
    - main.py: aggregated settings and the get_settings() singleton

Configuration Sources (precedence order):
    1. Values passed explicitly
    2. Environment Variables
    3. ``.env`` file
    4. Default Values in code

Quick Start:
    >>> from secretwatch.settings import get_settings
    >>> settings = get_settings()
    >>> settings.watcher.poll_interval_seconds
    300.0
"""

# Main settings and functions
from .main import _Settings, get_settings, _reload_settings

# Base classes
from .base import SecretWatchBaseSettings

# Domain-specific settings
from .features import FeatureSettings
from .kafka import KafkaSettings
from .keyvault import KeyVaultSettings
from .watcher import CONFLUENT_KEY_NAME, SCHEMA_REGISTRY_KEY_NAME, WatcherSettings

__all__ = [
    "get_settings",
    "SecretWatchBaseSettings",
    "KeyVaultSettings",
    "WatcherSettings",
    "FeatureSettings",
    "KafkaSettings",
    "CONFLUENT_KEY_NAME",
    "SCHEMA_REGISTRY_KEY_NAME",
]
