from typing import Dict

from pydantic import AliasChoices, Field

from secretwatch.common.exceptions import feature_not_enabled_error
from .base import SecretWatchBaseSettings


class FeatureSettings(SecretWatchBaseSettings):
    """Feature flags deciding whether credential watching runs at all."""

    is_local: bool = Field(
        default=False,
        validation_alias=AliasChoices("IS_LOCAL", "is_local"),
        description="Local development mode. Kafka runs without SASL/SSL and "
                   "no Confluent credentials are loaded or watched."
    )

    secret_watcher_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("SECRET_WATCHER_ENABLED", "secret_watcher_enabled"),
        description="Load Confluent credentials from Key Vault and restart the "
                   "application when they are rotated."
    )

    @property
    def use_confluent_kafka_config(self) -> bool:
        """Confluent Cloud (SASL_SSL) configuration is used outside local mode."""
        return not self.is_local

    @property
    def should_watch_secrets(self) -> bool:
        """Whether the bootstrap layer should construct and start the watcher."""
        return self.use_confluent_kafka_config and self.secret_watcher_enabled

    def _get_feature_list(self) -> list[str]:
        return [field_name for field_name in self.__class__.model_fields.keys() if field_name.endswith('_enabled')]

    def check_feature(self, feature_name: str, raise_on_disabled: bool = True) -> bool:
        """Check if a feature is enabled, optionally raising an error if disabled.

        Args:
            feature_name: Name of the feature to check (without '_enabled' suffix)
            raise_on_disabled: If True, raises when the feature is disabled

        Returns:
            bool: True if feature is enabled, False otherwise (only when raise_on_disabled=False)

        Raises:
            SecretWatchError: FEATURE_DISABLED if the feature is disabled and raise_on_disabled=True
            ValueError: If feature_name is not recognized
        """
        feature_map = self.get_feature_status()

        if feature_name not in feature_map:
            available_features = ', '.join(sorted(feature_map.keys()))
            raise ValueError(
                f"Unknown feature '{feature_name}'. "
                f"Available features: {available_features}"
            )

        is_enabled = feature_map[feature_name]

        if not is_enabled and raise_on_disabled:
            raise feature_not_enabled_error(
                feature_name=feature_name,
                message=f"Set {feature_name.upper()}_ENABLED=true to enable {feature_name.replace('_', ' ')}."
            )

        return is_enabled

    def get_feature_status(self) -> Dict[str, bool]:
        """Get the status of all features, keyed without the '_enabled' suffix."""
        return {feature.replace('_enabled', ''): getattr(self, feature) for feature in self._get_feature_list()}
