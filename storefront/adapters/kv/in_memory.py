"""In-memory key-value store with TTL.

Notes:
- Per-process only: running multiple workers gives each its own store, so
  rate limits multiply by the worker count. Use the Redis backend there.
- Thread-safe: uses a lock around shared state.
- Values are stored JSON-encoded so callers observe the same round-trip
  semantics as the Redis backend (tuples come back as lists, no aliasing).
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from storefront.adapters.kv.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    payload: str
    expires_at: float


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dict-backed store honoring per-key TTLs.

    Expired entries are dropped lazily when read and swept on every write, so
    no background timer is needed.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryKeyValueStore(size={len(self._entries)})"

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry):
                del self._entries[key]
                return None
            return json.loads(entry.payload)

    def put(self, key: str, value: Any, *, ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        payload = json.dumps(value)
        with self._lock:
            self._sweep_expired_locked()
            self._entries[key] = _Entry(
                payload=payload,
                expires_at=self._clock() + ttl_seconds,
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def list_keys(self, prefix: str) -> list[str]:
        with self._lock:
            self._sweep_expired_locked()
            return [key for key in self._entries if key.startswith(prefix)]

    def clear(self) -> None:
        """Drop every entry (test helper)."""

        with self._lock:
            self._entries.clear()

    def _is_expired(self, entry: _Entry) -> bool:
        return self._clock() >= entry.expires_at

    def _sweep_expired_locked(self) -> None:
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("kv.expired_swept", extra={"count": len(expired)})
