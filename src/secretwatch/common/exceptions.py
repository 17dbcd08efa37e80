from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for secretwatch operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific number range for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors (1xxx)
        VALIDATION_*: Input validation errors (2xxx)
        CONNECTION_*: Network and connection errors (3xxx)
        SECRET_*: Secret retrieval and credential errors (5xxx)
        STATE_*: Watcher lifecycle errors (8xxx)
        RETRY_*: Transient/retryable errors (9xxx)
    """
    # Configuration errors (1xxx)
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_MISSING = "CONFIG_002"
    CONFIG_INVALID = "CONFIG_003"
    FEATURE_DISABLED = "CONFIG_004"

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VALIDATION_001"

    # Connection errors (3xxx)
    CONNECTION_ERROR = "CONNECTION_001"
    AUTH_ERROR = "CONNECTION_002"
    TIMEOUT_ERROR = "CONNECTION_003"

    # Secret errors (5xxx)
    SECRET_NOT_FOUND = "SECRET_001"
    SECRET_INVALID = "SECRET_002"
    SECRET_STORE_ERROR = "SECRET_003"

    # Lifecycle errors (8xxx)
    INVALID_STATE = "STATE_001"

    # Retry/Transient errors (9xxx)
    RETRYABLE_ERROR = "RETRY_001"
    RATE_LIMIT_ERROR = "RETRY_002"


class SecretWatchError(Exception):
    """Base exception for all secretwatch-related errors.

    Errors are categorized by error code rather than by a deep class
    hierarchy. The few subclasses below exist only where callers need to
    catch a specific failure (e.g. the fatal initial credential load).

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
        is_retryable: Whether the error is transient and can be retried
    """

    default_error_code: ErrorCode = ErrorCode.CONFIG_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        is_retryable: bool = False
    ):
        """Initialize secretwatch error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum, defaults to the
                class level ``default_error_code``
            details: Additional error details
            cause: Optional underlying exception
            is_retryable: Whether error is transient
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        self.cause = cause
        self.is_retryable = is_retryable

        # Lazy import to avoid circular dependency
        from secretwatch.logging import get_logger
        logger = get_logger(__name__)
        logger.debug(
            message,
            extra={
                "error_code": self.error_code.value,
                "details": self.details,
                "is_retryable": is_retryable,
            },
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "is_retryable": self.is_retryable
        }

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: str,
        **kwargs
    ) -> "SecretWatchError":
        """Create exception from error code.

        Args:
            error_code: Error code
            message: Error message
            **kwargs: Additional arguments for SecretWatchError

        Returns:
            SecretWatchError instance
        """
        if error_code in [
            ErrorCode.TIMEOUT_ERROR,
            ErrorCode.RETRYABLE_ERROR,
            ErrorCode.RATE_LIMIT_ERROR
        ]:
            # Only set is_retryable if not explicitly provided by caller
            kwargs.setdefault('is_retryable', True)

        return cls(message=message, error_code=error_code, **kwargs)


class SecretStoreError(SecretWatchError):
    """The secret store could not return a value for a key."""

    default_error_code = ErrorCode.SECRET_STORE_ERROR

    def __init__(self, message: str, store_key: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if store_key:
            details["store_key"] = store_key
        super().__init__(message, details=details, **kwargs)
        self.store_key = store_key


class SecretNotFoundError(SecretStoreError):
    """The store holds no (or an empty) value under the key."""

    default_error_code = ErrorCode.SECRET_NOT_FOUND


class CredentialParseError(SecretWatchError):
    """A raw secret payload is not a valid credential."""

    default_error_code = ErrorCode.VALIDATION_ERROR


class InvalidCredentialError(SecretWatchError):
    """A tracked secret could not be loaded during watcher start.

    This is the only fatal watcher error. ``store_key`` names the secret
    that failed so the bootstrap layer can report it before aborting.
    """

    default_error_code = ErrorCode.SECRET_INVALID

    def __init__(self, store_key: str, reason: str, **kwargs):
        details = kwargs.pop("details", None) or {}
        details["store_key"] = store_key
        details["reason"] = reason
        super().__init__(
            f"No valid credential for secret '{store_key}': {reason}",
            details=details,
            **kwargs
        )
        self.store_key = store_key
        self.reason = reason


class WatcherStateError(SecretWatchError):
    """A watcher operation was called in a state that does not allow it."""

    default_error_code = ErrorCode.INVALID_STATE


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> SecretWatchError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        SecretWatchError with CONFIG_ERROR code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return SecretWatchError(
        message=message,
        error_code=ErrorCode.CONFIG_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def feature_not_enabled_error(
    feature_name: str,
    message: str = "",
    **kwargs
) -> SecretWatchError:
    """Create a feature not enabled error.

    Args:
        feature_name: Name of the feature that is disabled
        message: Additional message/guidance
        **kwargs: Additional error details

    Returns:
        SecretWatchError with FEATURE_DISABLED code
    """
    full_message = f"{feature_name} is not enabled. {message}".strip()

    details = kwargs.get('details', {})
    details["config_key"] = f"feature.{feature_name}"
    details["feature"] = feature_name

    return SecretWatchError(
        message=full_message,
        error_code=ErrorCode.FEATURE_DISABLED,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )
