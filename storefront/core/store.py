"""Process-wide key-value store and cache instances.

The instances are cached in-module so state (and the Redis connection pool)
is shared across requests. If store settings change (primarily in tests),
they are rebuilt.
"""

from __future__ import annotations

from storefront.adapters.kv.base import AbstractKeyValueStore
from storefront.adapters.kv.factory import create_kv_store
from storefront.core.config import settings
from storefront.utils.kv_cache import KVCache

_store: AbstractKeyValueStore | None = None
_store_config: tuple | None = None
_cache: KVCache | None = None


def _current_store_config() -> tuple:
    cfg = settings.store
    return (cfg.backend, cfg.redis_url, cfg.namespace, cfg.socket_timeout_seconds)


def get_kv_store() -> AbstractKeyValueStore:
    """Return the shared key-value store, building it on first use.

    Raises:
        ConfigurationError: If the configured backend is invalid.
    """

    global _store, _store_config, _cache

    config = _current_store_config()
    if _store is None or _store_config != config:
        _store = create_kv_store(settings.store)
        _store_config = config
        _cache = None

    return _store


def get_kv_cache() -> KVCache:
    """Return the shared cache-aside helper bound to the shared store."""

    global _cache

    store = get_kv_store()
    if _cache is None or _cache.default_ttl_seconds != settings.cache.default_ttl_seconds:
        _cache = KVCache(store, default_ttl_seconds=settings.cache.default_ttl_seconds)
    return _cache


def reset_store_state() -> None:
    """Drop cached instances so the next call rebuilds them (test helper)."""

    global _store, _store_config, _cache
    _store = None
    _store_config = None
    _cache = None
