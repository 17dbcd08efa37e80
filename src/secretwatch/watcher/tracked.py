"""Tracked secret definition."""

from dataclasses import dataclass, field
from typing import Callable, Optional

from secretwatch.types.credentials import CredentialValue

Parser = Callable[[str], CredentialValue]


@dataclass
class TrackedSecret:
    """One secret entry under observation by a RotationWatcher.

    Attributes:
        name: Stable name the credential is exposed under in the snapshot
        store_key: Key the secret is fetched with from the secret store
        parser: Pure function turning raw store text into a CredentialValue.
            Any exception it raises marks the payload as malformed.
        preloaded_value: Local development override. When set, the secret is
            never fetched from the store.
        last_known_value: Last successfully parsed value
    """

    name: str
    store_key: str
    parser: Parser = CredentialValue.from_json
    preloaded_value: Optional[CredentialValue] = None
    last_known_value: Optional[CredentialValue] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("TrackedSecret name must not be empty")
        if not self.store_key:
            raise ValueError(f"TrackedSecret '{self.name}' needs a store key")
        if self.preloaded_value is not None:
            self.last_known_value = self.preloaded_value

    @property
    def is_overridden(self) -> bool:
        return self.preloaded_value is not None

    def parse(self, raw: str) -> CredentialValue:
        return self.parser(raw)

    def record(self, value: CredentialValue) -> bool:
        """Cache a successfully parsed value.

        Returns:
            True if a previous value existed and differs from ``value``
        """
        changed = self.last_known_value is not None and value != self.last_known_value
        self.last_known_value = value
        return changed
