"""Common exceptions for secretwatch.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All exceptions inherit from
    SecretWatchError and include structured error information. A handful of
    subclasses exist where callers must catch a specific failure, most
    importantly InvalidCredentialError, raised when the initial credential
    load fails.
"""

from secretwatch.common.exceptions import (
    SecretWatchError,
    ErrorCode,
    SecretStoreError,
    SecretNotFoundError,
    CredentialParseError,
    InvalidCredentialError,
    WatcherStateError,
    # Helper functions
    configuration_error,
    feature_not_enabled_error,
)

__all__ = [
    # Base Exception and Error Codes
    "SecretWatchError",
    "ErrorCode",
    "SecretStoreError",
    "SecretNotFoundError",
    "CredentialParseError",
    "InvalidCredentialError",
    "WatcherStateError",
    # Helper functions
    "configuration_error",
    "feature_not_enabled_error",
]
