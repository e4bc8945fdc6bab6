from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Does not touch the key-value store, so a store outage never takes the
    instance out of rotation.
    """

    return {"status": "ok"}
