"""Factory for key-value store instances."""

from __future__ import annotations

from storefront.adapters.kv.base import AbstractKeyValueStore
from storefront.adapters.kv.in_memory import InMemoryKeyValueStore
from storefront.adapters.kv.redis_store import RedisKeyValueStore
from storefront.core.config import StoreSettings, settings
from storefront.core.errors import ConfigurationError


def create_kv_store(store_settings: StoreSettings | None = None) -> AbstractKeyValueStore:
    """Instantiate the configured key-value store backend.

    Args:
        store_settings: Optional settings; defaults to the global ``settings.store``.

    Returns:
        AbstractKeyValueStore: Ready-to-use store.

    Raises:
        ConfigurationError: If the backend is unknown or misconfigured.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryKeyValueStore()

    if backend == "redis":
        if not cfg.redis_url:
            raise ConfigurationError(
                code="store_missing_redis_url",
                message="Redis store backend requires STORE_REDIS_URL",
                details={"backend": backend},
            )
        return RedisKeyValueStore.from_url(
            cfg.redis_url,
            namespace=cfg.namespace,
            socket_timeout_seconds=cfg.socket_timeout_seconds,
        )

    raise ConfigurationError(
        code="store_unknown_backend",
        message=f"Unknown store backend: '{backend}'. Supported backends: memory, redis",
        details={"backend": backend},
    )
