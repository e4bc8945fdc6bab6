"""Pydantic schemas for administrative endpoints."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class RateLimitPolicyInfo(BaseModel):
    """One entry of the rate limit policy registry."""

    action: str = Field(..., description="Policy name used by routes, e.g. 'contact'.")
    limit: int = Field(..., description="Maximum admitted events per window.")
    window_seconds: int = Field(..., description="Sliding window width in seconds.")
    key_prefix: str = Field(..., description="Namespace of the policy's store keys.")


class RateLimitPolicyList(BaseModel):
    policies: List[RateLimitPolicyInfo] = Field(default_factory=list)


class CacheInvalidationResponse(BaseModel):
    """Outcome of a prefix invalidation."""

    prefix: str = Field(..., description="Prefix that was invalidated.")
    deleted: int = Field(..., description="Number of cache keys removed.")
