"""Key-value store interface.

Consumers store JSON-compatible values (lists of timestamps, cached query
results) with a per-key TTL enforced by the store itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class AbstractKeyValueStore(ABC):
    """Interface for key-value stores with per-key expiry.

    Implementations raise ``StoreUnavailableError`` when the backend cannot
    serve a request; they never turn a failure into a miss.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under key, or None if absent/expired."""
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any, *, ttl_seconds: int) -> None:
        """Store value under key, overwriting it and restarting its TTL.

        Args:
            key: Storage key.
            value: JSON-compatible value.
            ttl_seconds: Seconds until the store drops the key (>= 1).
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key. Deleting an absent key is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def list_keys(self, prefix: str) -> list[str]:
        """List live keys starting with prefix."""
        raise NotImplementedError
