"""Unit tests for the cache-aside helper."""

from unittest.mock import Mock

import pytest

from storefront.core.errors import StoreUnavailableError
from storefront.utils.kv_cache import FOREVER_TTL_SECONDS, CacheKeys, KVCache


@pytest.fixture
def cache(memory_store) -> KVCache:
    return KVCache(memory_store, default_ttl_seconds=300)


def test_set_and_get_updates_hit_miss_counters(cache) -> None:
    assert cache.get("missing") is None

    cache.set("products:1", {"id": 1, "name": "Cidre brut"})
    assert cache.get("products:1") == {"id": 1, "name": "Cidre brut"}

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_set_uses_default_ttl(cache, clock) -> None:
    cache.set("k", 1)

    clock.advance(299)
    assert cache.get("k") == 1
    clock.advance(1)
    assert cache.get("k") is None


def test_set_with_explicit_ttl(cache, clock) -> None:
    cache.set("k", 1, ttl_seconds=10)

    clock.advance(10)
    assert cache.get("k") is None


def test_delete(cache) -> None:
    cache.set("k", 1)
    cache.delete("k")

    assert cache.get("k") is None


def test_remember_calls_callback_only_on_miss(cache) -> None:
    callback = Mock(return_value=[{"id": 1}])

    first = cache.remember(CacheKeys.products_all(), callback, ttl_seconds=60)
    second = cache.remember(CacheKeys.products_all(), callback, ttl_seconds=60)

    assert first == second == [{"id": 1}]
    callback.assert_called_once_with()


def test_remember_recomputes_after_expiry(cache, clock) -> None:
    callback = Mock(side_effect=[1, 2])

    assert cache.remember("k", callback, ttl_seconds=5) == 1
    clock.advance(5)
    assert cache.remember("k", callback, ttl_seconds=5) == 2


def test_remember_does_not_cache_none(cache) -> None:
    callback = Mock(return_value=None)

    cache.remember("k", callback)
    cache.remember("k", callback)

    assert callback.call_count == 2


def test_remember_propagates_callback_errors(cache) -> None:
    with pytest.raises(RuntimeError):
        cache.remember("k", Mock(side_effect=RuntimeError("db down")))

    assert cache.get("k") is None


def test_remember_forever_uses_one_year_ttl() -> None:
    store = Mock()
    store.get.return_value = None
    cache = KVCache(store)

    assert cache.remember_forever("countries", lambda: ["FR", "ES"]) == ["FR", "ES"]
    store.put.assert_called_once_with("countries", ["FR", "ES"], ttl_seconds=FOREVER_TTL_SECONDS)
    assert FOREVER_TTL_SECONDS == 31_536_000


def test_invalidate_by_prefix(cache) -> None:
    cache.set(CacheKeys.product(1), {"id": 1})
    cache.set(CacheKeys.products_by_country("France"), [1])
    cache.set(CacheKeys.order(7), {"id": 7})

    deleted = cache.invalidate_by_prefix("products:")

    assert deleted == 2
    assert cache.get(CacheKeys.product(1)) is None
    assert cache.get(CacheKeys.order(7)) == {"id": 7}


def test_store_errors_propagate() -> None:
    store = Mock()
    store.get.side_effect = StoreUnavailableError(code="store_unavailable", message="down")
    callback = Mock()

    with pytest.raises(StoreUnavailableError):
        KVCache(store).remember("k", callback)

    callback.assert_not_called()


def test_invalid_default_ttl(memory_store) -> None:
    with pytest.raises(ValueError):
        KVCache(memory_store, default_ttl_seconds=0)


def test_cache_keys() -> None:
    assert CacheKeys.products_all() == "products:all"
    assert CacheKeys.product(12) == "products:12"
    assert CacheKeys.products_by_category("brut") == "products:category:brut"
    assert CacheKeys.products_by_country("France") == "products:country:France"
    assert CacheKeys.order(3) == "orders:3"
    assert CacheKeys.orders_recent() == "orders:recent"
    assert CacheKeys.stats_daily("2024-05-01") == "stats:daily:2024-05-01"
    assert CacheKeys.stats_monthly("2024-05") == "stats:monthly:2024-05"
