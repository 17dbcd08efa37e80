"""Credential value types.

A ``CredentialValue`` is the parsed form of one secret entry: an identifier
(``key``) and the matching secret string. Secret store entries hold it as a
JSON object with exactly those two fields::

    {"key": "ABCDEF", "secret": "my secret"}

``CredentialSnapshot`` is the read-only view of every tracked credential that
the watcher exposes to the streaming client. The watcher is its only writer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Mapping, Optional

from pydantic import ConfigDict, Field, SecretStr, StrictStr, ValidationError, field_validator

from secretwatch.common.exceptions import CredentialParseError
from .base import SecretWatchBaseModel


class CredentialValue(SecretWatchBaseModel):
    """Immutable identifier/secret pair.

    Equality is structural, so two values parsed from the same payload
    compare equal and a rotated secret compares unequal.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: StrictStr = Field(..., min_length=1, description="Credential identifier (username / API key)")
    secret: SecretStr = Field(..., description="Secret matching the identifier (password / API secret)")

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("secret must not be empty")
        return value

    @classmethod
    def from_json(cls, raw: str) -> "CredentialValue":
        """Parse a raw secret store payload.

        Args:
            raw: JSON text with exactly the ``key`` and ``secret`` fields

        Returns:
            The parsed credential

        Raises:
            CredentialParseError: If the payload is not JSON, is not an object,
                has missing or extra fields, or holds non-string/empty values.
                The error never carries the payload itself.
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            problems = sorted(
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}:{err['type']}"
                for err in exc.errors()
            )
            raise CredentialParseError(
                "Secret payload is not a valid credential",
                details={"problems": problems},
            ) from None

    def as_sasl(self) -> Dict[str, str]:
        """Username/password pair for SASL PLAIN authentication."""
        return {"username": self.key, "password": self.secret.get_secret_value()}

    def basic_auth_user_info(self) -> str:
        """``key:secret`` form used by schema registry basic auth."""
        return f"{self.key}:{self.secret.get_secret_value()}"


class CredentialSnapshot(Mapping[str, CredentialValue]):
    """Read-only mapping of tracked secret name to its current credential.

    The snapshot is refreshed in place when the watcher observes a new value,
    so holders always read the latest credential. ``version`` increases on
    every refresh.
    """

    def __init__(self, values: Optional[Mapping[str, CredentialValue]] = None):
        self._values: Dict[str, CredentialValue] = dict(values or {})
        self._version = 0

    def __getitem__(self, name: str) -> CredentialValue:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"CredentialSnapshot(version={self._version}, keys={self.identifiers()})"

    @property
    def version(self) -> int:
        return self._version

    def identifiers(self) -> Dict[str, str]:
        """Name to credential identifier, without secrets."""
        return {name: value.key for name, value in self._values.items()}

    def _update(self, name: str, value: CredentialValue) -> None:
        self._values[name] = value
        self._version += 1


class FailureReason(str, Enum):
    """Why a fetch attempt did not produce a credential."""

    EMPTY = "empty"
    MALFORMED = "malformed"
    STORE_ERROR = "store_error"


@dataclass(frozen=True)
class RetrievalOutcome:
    """Result of one fetch attempt for one tracked secret."""

    store_key: str
    value: Optional[CredentialValue] = None
    reason: Optional[FailureReason] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def success(cls, store_key: str, value: CredentialValue) -> "RetrievalOutcome":
        return cls(store_key=store_key, value=value)

    @classmethod
    def failure(
        cls,
        store_key: str,
        reason: FailureReason,
        error: Optional[Exception] = None,
    ) -> "RetrievalOutcome":
        return cls(store_key=store_key, reason=reason, error=error)

    def describe(self) -> str:
        if self.ok:
            return "ok"
        if self.error is not None:
            return f"{self.reason.value}: {self.error}"
        return self.reason.value
