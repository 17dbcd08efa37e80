from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecretWatchBaseSettings(BaseSettings):
    """Base class for all secretwatch settings.

    Values are read from environment variables (case-insensitive) and an
    optional ``.env`` file. Fields may also be passed by name, which is how
    tests and embedding applications build settings explicitly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        env_nested_delimiter="__"
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts for remote operations"
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Initial delay between retry attempts in seconds"
    )

