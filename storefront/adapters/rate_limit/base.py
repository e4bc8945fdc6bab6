"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the admission policy can change without touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitPolicy:
    """Named configuration for one rate-limited action.

    Attributes:
        limit: Maximum admitted events per window. 0 denies every event.
        window_seconds: Width of the sliding window in seconds.
        key_prefix: Namespace of this policy's keys in the store.
    """

    limit: int
    window_seconds: int
    key_prefix: str

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("limit must be >= 0")
        if self.window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

    @property
    def window_ms(self) -> int:
        return self.window_seconds * 1000

    def storage_key(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the event is admitted.
        limit: Max events per window.
        remaining: Events still admissible in the window (0 when denied).
        reset_at: UNIX epoch milliseconds when the window next admits
            (denied) or when this event leaves the window (admitted).
        retry_after_seconds: Wait time in seconds when denied, else None.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(self, identifier: str) -> RateLimitDecision:
        """Decide whether a new event for identifier is admitted.

        Admitted events are recorded; denied ones are not.

        Args:
            identifier: Opaque counter id (e.g., client IP address).

        Returns:
            RateLimitDecision describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, identifier: str) -> None:
        """Forget every recorded event for identifier."""
        raise NotImplementedError
