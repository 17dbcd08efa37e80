"""Type definitions for secretwatch.

This module provides the base model and the credential types shared by the
secret stores, the rotation watcher and the streaming client configuration.
"""

from .base import SecretWatchBaseModel
from .credentials import (
    CredentialSnapshot,
    CredentialValue,
    FailureReason,
    RetrievalOutcome,
)

__all__ = [
    # Base model
    'SecretWatchBaseModel',
    # Credentials
    'CredentialValue',
    'CredentialSnapshot',
    'FailureReason',
    'RetrievalOutcome',
]
