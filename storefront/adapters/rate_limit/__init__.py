"""Rate limiting adapters.

Sliding-window admission control over the shared key-value store, plus the
static registry of named policies (api, contact, login, newsletter, order).
"""

from storefront.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitDecision,
    RateLimitPolicy,
)
from storefront.adapters.rate_limit.policies import (
    RATE_LIMIT_POLICIES,
    create_rate_limiter,
    get_rate_limit_policy,
)
from storefront.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RATE_LIMIT_POLICIES",
    "RateLimitDecision",
    "RateLimitPolicy",
    "SlidingWindowRateLimiter",
    "create_rate_limiter",
    "get_rate_limit_policy",
]
