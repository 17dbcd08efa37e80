"""Base model class for all secretwatch models with serialization support."""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, SecretStr


class SecretWatchBaseModel(BaseModel):
    """Base model for all secretwatch models with built-in serialization.

    Provides common functionality for all secretwatch models including:
    - Serialization to dictionary via to_dict()
    - Consistent configuration
    - Secret values masked on serialization
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
        validate_assignment=True
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary for serialization.

        ``SecretStr`` fields are rendered masked, so the result is safe to
        log or return from diagnostics endpoints.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        data = self.model_dump(by_alias=False, exclude_none=True)

        def convert_nested(obj):
            if isinstance(obj, SecretStr):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: convert_nested(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_nested(item) for item in obj]
            elif hasattr(obj, 'value'):  # Handle enums
                return obj.value
            return obj

        return convert_nested(data)
