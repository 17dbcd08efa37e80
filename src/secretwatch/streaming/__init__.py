from .config import build_kafka_config, build_schema_registry_config

__all__ = ["build_kafka_config", "build_schema_registry_config"]
