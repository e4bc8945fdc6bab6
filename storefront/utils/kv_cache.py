"""Cache-aside helper over the key-value store.

Used by catalogue and order read paths to avoid repeated database queries:

    cache = KVCache(store)
    products = cache.remember(CacheKeys.products_all(), load_products, ttl_seconds=300)

Store failures are not hidden: ``StoreUnavailableError`` reaches the caller.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, TypeVar

from storefront.adapters.kv.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# One year, used for data that only changes on deploy (countries, cideries).
FOREVER_TTL_SECONDS = 31_536_000


class KVCache:
    """JSON value cache with per-entry TTL and prefix invalidation.

    Attributes:
        default_ttl_seconds: TTL applied when ``set``/``remember`` get none.
    """

    def __init__(self, store: AbstractKeyValueStore, *, default_ttl_seconds: int = 3600) -> None:
        if default_ttl_seconds < 1:
            raise ValueError("default_ttl_seconds must be >= 1")
        self._store = store
        self.default_ttl_seconds = default_ttl_seconds
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""

        value = self._store.get(key)
        with self._lock:
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
        logger.debug("cache.miss" if value is None else "cache.hit", extra={"cache_key": key})
        return value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds or self.default_ttl_seconds
        self._store.put(key, value, ttl_seconds=ttl)
        logger.debug("cache.set", extra={"cache_key": key, "ttl_s": ttl})

    def delete(self, key: str) -> None:
        self._store.delete(key)

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix.

        Args:
            prefix: Key prefix, e.g. ``"products:"``.

        Returns:
            Number of keys deleted.
        """

        keys = self._store.list_keys(prefix)
        for key in keys:
            self._store.delete(key)
        logger.info("cache.invalidated", extra={"prefix": prefix, "count": len(keys)})
        return len(keys)

    def remember(
        self,
        key: str,
        callback: Callable[[], T],
        ttl_seconds: int | None = None,
    ) -> T:
        """Return the cached value or compute, store and return it.

        A cached ``None`` counts as a miss, so callbacks returning None are
        re-run on every call.
        """

        cached = self.get(key)
        if cached is not None:
            return cached

        value = callback()
        self.set(key, value, ttl_seconds)
        return value

    def remember_forever(self, key: str, callback: Callable[[], T]) -> T:
        return self.remember(key, callback, FOREVER_TTL_SECONDS)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "default_ttl_seconds": self.default_ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
            }


class CacheKeys:
    """Structured cache key builders."""

    @staticmethod
    def products_all() -> str:
        return "products:all"

    @staticmethod
    def product(product_id: int) -> str:
        return f"products:{product_id}"

    @staticmethod
    def products_by_category(category: str) -> str:
        return f"products:category:{category}"

    @staticmethod
    def products_by_country(country: str) -> str:
        return f"products:country:{country}"

    @staticmethod
    def order(order_id: int) -> str:
        return f"orders:{order_id}"

    @staticmethod
    def orders_recent() -> str:
        return "orders:recent"

    @staticmethod
    def stats_daily(date: str) -> str:
        return f"stats:daily:{date}"

    @staticmethod
    def stats_monthly(month: str) -> str:
        return f"stats:monthly:{month}"
