"""Rate limiting dependencies for FastAPI routes.

This module wires the sliding-window limiter into the HTTP layer.

Design goals:
- Routes name a policy only: ``Depends(require_rate_limit("contact"))``.
- Unknown policy names fail when the route module is imported, not per request.
- Store outages follow ``APP_RATE_LIMIT_FAIL_OPEN``; the limiter itself never
  decides between allow and deny on failure.

Identifier strategy:
- Client address from the trusted proxy header when configured
  (``APP_TRUSTED_IP_HEADER``, e.g. ``CF-Connecting-IP``).
- Otherwise the socket peer address.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from fastapi import HTTPException, Request, Response, status

from storefront.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from storefront.adapters.rate_limit.policies import create_rate_limiter, get_rate_limit_policy
from storefront.core.config import settings
from storefront.core.errors import StoreUnavailableError
from storefront.core.logging import hash_identifier
from storefront.core.store import get_kv_store

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_rate_limiter(action: str) -> AbstractRateLimiter:
    """Return a limiter for the named policy bound to the shared store.

    Limiters hold no state of their own, so building one per call is cheap
    and always picks up the current store.

    Raises:
        ConfigurationError: If the action name is unknown.
    """

    return create_rate_limiter(get_kv_store(), action)


def resolve_client_identifier(request: Request) -> str:
    """Derive the rate limit identifier for the current request.

    Args:
        request: FastAPI request.

    Returns:
        str: Client address, or "unknown" when none is available.
    """

    header_name = settings.app.trusted_ip_header
    if header_name:
        forwarded = request.headers.get(header_name)
        if forwarded:
            # X-Forwarded-For style headers carry a chain; the client is first.
            return forwarded.split(",")[0].strip() or UNKNOWN_CLIENT

    return request.client.host if request.client else UNKNOWN_CLIENT


def build_rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Render a decision as X-RateLimit-* (and Retry-After) headers."""

    headers = {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(math.ceil(decision.reset_at / 1000)),
    }
    if decision.retry_after_seconds is not None:
        headers["Retry-After"] = str(max(0, decision.retry_after_seconds))
    return headers


def require_rate_limit(action: str) -> Callable[[Request, Response], None]:
    """Build a FastAPI dependency enforcing the named policy.

    Usage:
        @router.post("/contact", dependencies=[Depends(require_rate_limit("contact"))])

    Args:
        action: Registered policy name.

    Returns:
        Dependency callable consuming one event per request.

    Raises:
        ConfigurationError: Immediately, if the action name is unknown.
    """

    policy = get_rate_limit_policy(action)

    def enforce_rate_limit(request: Request, response: Response) -> None:
        """Consume one event for the requester or raise HTTP 429."""

        if not settings.app.rate_limit_enabled:
            return

        identifier = resolve_client_identifier(request)
        identifier_hash = hash_identifier(identifier)
        limiter = get_rate_limiter(action)

        try:
            decision = limiter.check(identifier)
        except StoreUnavailableError as exc:
            if not settings.app.rate_limit_fail_open:
                logger.error(
                    "rate_limit.store_unavailable",
                    extra={"action": action, "fail_open": False, "error_code": exc.code},
                )
                raise
            logger.warning(
                "rate_limit.store_unavailable",
                extra={"action": action, "fail_open": True, "error_code": exc.code},
            )
            return

        include_headers = settings.app.rate_limit_include_headers

        if decision.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "action": action,
                    "identifier_hash": identifier_hash,
                    "limit": decision.limit,
                    "remaining": decision.remaining,
                    "window_s": policy.window_seconds,
                },
            )
            if include_headers:
                response.headers.update(build_rate_limit_headers(decision))
            return

        retry_after = max(0, decision.retry_after_seconds or 0)
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "action": action,
                "identifier_hash": identifier_hash,
                "limit": decision.limit,
                "window_s": policy.window_seconds,
                "retry_after_s": retry_after,
            },
        )

        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Try again later.",
            headers=build_rate_limit_headers(decision) if include_headers else None,
        )

    enforce_rate_limit.__name__ = f"enforce_{action}_rate_limit"
    return enforce_rate_limit
