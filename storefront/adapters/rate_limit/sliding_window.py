"""Sliding-window rate limiter backed by a key-value store.

Each identifier owns one record: the list of admitted event timestamps
(epoch milliseconds) written with TTL = window, so idle records expire on
their own. Pruning of old timestamps happens lazily on ``check``.

Notes:
- Read and write are two separate store calls with no lock in between.
  Concurrent checks for the same identifier can overwrite each other's
  event, so under contention the limiter undercounts and may briefly admit
  more than ``limit`` events. It never over-restricts.
- Store failures propagate to the caller as ``StoreUnavailableError``.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable

from storefront.adapters.kv.base import AbstractKeyValueStore
from storefront.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitDecision,
    RateLimitPolicy,
)

logger = logging.getLogger(__name__)


def _coerce_timestamps(raw: Any) -> list[int]:
    """Normalize a stored record into a list of integer timestamps."""
    if not isinstance(raw, list):
        return []
    return [int(ts) for ts in raw if isinstance(ts, (int, float)) and not isinstance(ts, bool)]


class SlidingWindowRateLimiter(AbstractRateLimiter):
    """Admit at most ``policy.limit`` events per trailing window per identifier."""

    def __init__(
        self,
        store: AbstractKeyValueStore,
        policy: RateLimitPolicy,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Key-value store holding the per-identifier records.
            policy: Limit, window and key namespace to enforce.
            clock: Time source function returning UNIX time in seconds.
        """
        self._store = store
        self._policy = policy
        self._clock = clock

    @property
    def policy(self) -> RateLimitPolicy:
        return self._policy

    def check(self, identifier: str) -> RateLimitDecision:
        policy = self._policy
        key = policy.storage_key(identifier)
        now = int(self._clock() * 1000)
        window_start = now - policy.window_ms

        timestamps = [
            ts for ts in _coerce_timestamps(self._store.get(key)) if ts > window_start
        ]

        if len(timestamps) >= policy.limit:
            # Window frees up when its oldest event ages out. With limit=0 there
            # may be no event at all; report a full window from now.
            oldest = min(timestamps) if timestamps else now
            reset_at = oldest + policy.window_ms
            retry_after = max(0, math.ceil((reset_at - now) / 1000))
            logger.debug(
                "rate_limit.denied",
                extra={
                    "key_prefix": policy.key_prefix,
                    "count": len(timestamps),
                    "limit": policy.limit,
                    "retry_after_s": retry_after,
                },
            )
            return RateLimitDecision(
                allowed=False,
                limit=policy.limit,
                remaining=0,
                reset_at=reset_at,
                retry_after_seconds=retry_after,
            )

        timestamps.append(now)
        self._store.put(key, timestamps, ttl_seconds=policy.window_seconds)

        return RateLimitDecision(
            allowed=True,
            limit=policy.limit,
            remaining=max(0, policy.limit - len(timestamps)),
            reset_at=now + policy.window_ms,
        )

    def reset(self, identifier: str) -> None:
        self._store.delete(self._policy.storage_key(identifier))
        logger.info(
            "rate_limit.reset",
            extra={"key_prefix": self._policy.key_prefix},
        )
