"""Streaming client configuration built from the current credentials.

Both builders read the snapshot when called, so a client created after the
watcher started always authenticates with the credentials the watcher holds.
"""

from typing import Any, Dict, Mapping, Optional

from secretwatch.common.exceptions import configuration_error
from secretwatch.settings.kafka import KafkaSettings
from secretwatch.types.credentials import CredentialValue
from secretwatch.watcher.confluent import BROKER, SCHEMA_REGISTRY


def _credential(snapshot: Mapping[str, CredentialValue], name: str) -> CredentialValue:
    try:
        return snapshot[name]
    except KeyError:
        raise configuration_error(
            f"No '{name}' credential loaded; start the credential watcher first",
            config_key=name,
        ) from None


def build_kafka_config(
    snapshot: Mapping[str, CredentialValue],
    kafka: KafkaSettings,
    use_confluent: bool = True,
) -> Dict[str, Any]:
    """Build a librdkafka-style client configuration.

    Args:
        snapshot: Credentials keyed by tracked secret name
        kafka: Kafka connection settings
        use_confluent: Authenticate with SASL_SSL/PLAIN using the broker
            credential. False for a local plaintext broker.

    Raises:
        SecretWatchError: CONFIG_ERROR if the broker credential is missing
    """
    config: Dict[str, Any] = {"bootstrap.servers": ",".join(kafka.brokers)}
    if not use_confluent:
        return config

    sasl = _credential(snapshot, BROKER).as_sasl()
    config.update({
        "security.protocol": "SASL_SSL",
        "sasl.mechanisms": "PLAIN",
        "sasl.username": sasl["username"],
        "sasl.password": sasl["password"],
    })
    return config


def build_schema_registry_config(
    snapshot: Mapping[str, CredentialValue],
    kafka: KafkaSettings,
    use_confluent: bool = True,
) -> Optional[Dict[str, str]]:
    """Build the schema registry client configuration.

    Returns:
        ``url`` and ``basic.auth.user.info``, or None when producing through
        the schema registry is disabled or Confluent config is not in use

    Raises:
        SecretWatchError: CONFIG_ERROR if the URL or the credential is missing
    """
    if not (use_confluent and kafka.use_schema_registry):
        return None
    if not kafka.schema_registry_url:
        raise configuration_error(
            "SCHEMA_REGISTRY_URL must be set when USE_SCHEMA_REGISTRY_PRODUCER is enabled",
            config_key="SCHEMA_REGISTRY_URL",
        )

    return {
        "url": kafka.schema_registry_url,
        "basic.auth.user.info": _credential(snapshot, SCHEMA_REGISTRY).basic_auth_user_info(),
    }
