from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Response, status

from storefront.adapters.rate_limit.policies import RATE_LIMIT_POLICIES
from storefront.core.auth import verify_api_key
from storefront.core.errors import ConfigurationError, NotFoundAppError
from storefront.core.logging import hash_identifier
from storefront.core.rate_limit import get_rate_limiter
from storefront.core.store import get_kv_cache
from storefront.schemas.admin import (
    CacheInvalidationResponse,
    RateLimitPolicyInfo,
    RateLimitPolicyList,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("/rate-limits", response_model=RateLimitPolicyList)
def list_rate_limit_policies() -> RateLimitPolicyList:
    """List the registered rate limit policies."""

    return RateLimitPolicyList(
        policies=[
            RateLimitPolicyInfo(
                action=action,
                limit=policy.limit,
                window_seconds=policy.window_seconds,
                key_prefix=policy.key_prefix,
            )
            for action, policy in sorted(RATE_LIMIT_POLICIES.items())
        ]
    )


@router.delete(
    "/rate-limits/{action}/{identifier}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def reset_rate_limit(action: str, identifier: str) -> Response:
    """Reopen the full window for one identifier under one policy.

    Idempotent: resetting an identifier with no recorded events succeeds.

    Raises:
        NotFoundAppError: If no policy is registered under ``action``.
    """

    try:
        limiter = get_rate_limiter(action)
    except ConfigurationError as exc:
        raise NotFoundAppError(
            code=exc.code,
            message=exc.message,
            details=exc.details,
        ) from exc

    limiter.reset(identifier)
    logger.info(
        "admin.rate_limit_reset",
        extra={"action": action, "identifier_hash": hash_identifier(identifier)},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/cache", response_model=CacheInvalidationResponse)
def invalidate_cache(
    prefix: str = Query(..., min_length=1, description="Key prefix, e.g. 'products:'"),
) -> CacheInvalidationResponse:
    """Invalidate every cached entry whose key starts with ``prefix``."""

    deleted = get_kv_cache().invalidate_by_prefix(prefix)
    return CacheInvalidationResponse(prefix=prefix, deleted=deleted)
