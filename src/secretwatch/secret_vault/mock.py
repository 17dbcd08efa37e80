"""In-memory secret store for testing and development.

This module provides the InMemorySecretStore class which implements the
SecretStore protocol without requiring actual Key Vault access.
"""

import json
from collections import deque
from typing import Deque, Dict, List, Optional

from secretwatch.common.exceptions import SecretNotFoundError, SecretStoreError


class InMemorySecretStore:
    """In-memory secret store for testing and development.

    Values can be changed at any time with ``set_secret`` to simulate an
    out-of-band rotation. Every fetched key is appended to ``calls`` so tests
    can assert which keys were (or were not) requested.

    Attributes:
        values: Dictionary mapping secret names to raw values
        calls: Keys passed to ``fetch``, in call order
    """

    def __init__(self, values: Optional[Dict[str, str]] = None):
        """Initialize the in-memory store.

        Args:
            values: Dictionary of secret_name -> raw value mappings.
                    If None, default local development values are used.
        """
        self.values: Dict[str, str] = dict(values) if values is not None else self._get_default_values()
        self.calls: List[str] = []
        self._failures: Deque[Exception] = deque()
        self.closed = False

    def _get_default_values(self) -> Dict[str, str]:
        """Get default values for the Confluent secrets.

        Returns:
            Dictionary of default secret name to value mappings
        """
        local = json.dumps({"key": "local-key", "secret": "local-secret"})
        return {
            "realtime-confluent-key": local,
            "realtime-schema-registry-key": local,
        }

    async def fetch(self, key: str) -> str:
        """Return the stored value for ``key``.

        Raises:
            SecretNotFoundError: If nothing is stored under the key
            SecretStoreError: If a failure was queued with ``fail_next``
        """
        self.calls.append(key)

        if self._failures:
            raise self._failures.popleft()

        value = self.values.get(key)
        if value is None:
            raise SecretNotFoundError(f"Could not find secret under secretName={key}", store_key=key)
        return value

    def set_secret(self, key: str, value: str) -> None:
        """Add or replace a secret value."""
        self.values[key] = value

    def set_credential(self, key: str, identifier: str, secret: str) -> None:
        """Store a credential in the ``{"key": ..., "secret": ...}`` payload format."""
        self.values[key] = json.dumps({"key": identifier, "secret": secret})

    def remove_secret(self, key: str) -> None:
        self.values.pop(key, None)

    def fail_next(self, error: Optional[Exception] = None) -> None:
        """Make the next ``fetch`` call raise ``error`` (a store error by default)."""
        self._failures.append(error or SecretStoreError("Simulated secret store failure"))

    def calls_for(self, key: str) -> int:
        return self.calls.count(key)

    async def close(self) -> None:
        self.closed = True
