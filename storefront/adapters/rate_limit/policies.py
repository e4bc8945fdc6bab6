"""Static registry of named rate limit policies.

Built once at import time and exposed read-only; there is no runtime
mutation of limits.
"""

from __future__ import annotations

import time
from types import MappingProxyType
from typing import Callable, Mapping

from storefront.adapters.kv.base import AbstractKeyValueStore
from storefront.adapters.rate_limit.base import RateLimitPolicy
from storefront.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter
from storefront.core.errors import ConfigurationError


RATE_LIMIT_POLICIES: Mapping[str, RateLimitPolicy] = MappingProxyType(
    {
        # General API traffic: 100 requests per minute
        "api": RateLimitPolicy(limit=100, window_seconds=60, key_prefix="rl:api"),
        # Contact form: 3 messages per hour
        "contact": RateLimitPolicy(limit=3, window_seconds=3600, key_prefix="rl:contact"),
        # Login: 5 attempts per 15 minutes
        "login": RateLimitPolicy(limit=5, window_seconds=900, key_prefix="rl:login"),
        # Newsletter: 1 signup per day per address
        "newsletter": RateLimitPolicy(limit=1, window_seconds=86400, key_prefix="rl:newsletter"),
        # Order creation: 10 per hour
        "order": RateLimitPolicy(limit=10, window_seconds=3600, key_prefix="rl:order"),
    }
)


def get_rate_limit_policy(action: str) -> RateLimitPolicy:
    """Look up the policy registered for an action name.

    Args:
        action: Policy name (e.g., "contact").

    Returns:
        The registered RateLimitPolicy.

    Raises:
        ConfigurationError: If no policy is registered under that name.
    """
    policy = RATE_LIMIT_POLICIES.get(action)
    if policy is None:
        raise ConfigurationError(
            code="unknown_rate_limit_policy",
            message=f"Unknown rate limit policy: '{action}'",
            details={
                "action": action,
                "hint": f"Known policies: {', '.join(sorted(RATE_LIMIT_POLICIES))}",
            },
        )
    return policy


def create_rate_limiter(
    store: AbstractKeyValueStore,
    action: str,
    *,
    clock: Callable[[], float] = time.time,
) -> SlidingWindowRateLimiter:
    """Build a sliding-window limiter for a named policy.

    Raises:
        ConfigurationError: If the action name is unknown.
    """
    return SlidingWindowRateLimiter(store, get_rate_limit_policy(action), clock=clock)
