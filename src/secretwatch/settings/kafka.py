from typing import List, Optional

from pydantic import AliasChoices, Field

from .base import SecretWatchBaseSettings


class KafkaSettings(SecretWatchBaseSettings):
    """Connection settings for the streaming client the credentials are for."""

    hosts: str = Field(
        default="localhost:9092",
        validation_alias=AliasChoices("KAFKA_HOSTS", "hosts"),
        description="Comma-separated list of Kafka bootstrap servers"
    )
    schema_registry_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("SCHEMA_REGISTRY_URL", "schema_registry_url"),
        description="Confluent schema registry URL"
    )
    use_schema_registry: bool = Field(
        default=False,
        validation_alias=AliasChoices("USE_SCHEMA_REGISTRY_PRODUCER", "use_schema_registry"),
        description="Produce through the schema registry"
    )

    @property
    def brokers(self) -> List[str]:
        return [host.strip() for host in self.hosts.split(",") if host.strip()]
