"""Unit tests for the in-memory key-value store."""

import threading

import pytest

from storefront.adapters.kv.in_memory import InMemoryKeyValueStore


def test_get_missing_key_returns_none(memory_store) -> None:
    assert memory_store.get("missing") is None


def test_put_then_get_round_trips_json_values(memory_store) -> None:
    memory_store.put("k", {"ids": (1, 2), "name": "Brut"}, ttl_seconds=10)

    assert memory_store.get("k") == {"ids": [1, 2], "name": "Brut"}


def test_returned_values_are_copies(memory_store) -> None:
    memory_store.put("k", [1, 2], ttl_seconds=10)

    first = memory_store.get("k")
    first.append(3)

    assert memory_store.get("k") == [1, 2]


def test_entry_expires_after_ttl(memory_store, clock) -> None:
    memory_store.put("k", 1, ttl_seconds=5)

    clock.advance(4)
    assert memory_store.get("k") == 1

    clock.advance(1)
    assert memory_store.get("k") is None


def test_put_overwrites_and_restarts_ttl(memory_store, clock) -> None:
    memory_store.put("k", 1, ttl_seconds=5)
    clock.advance(4)
    memory_store.put("k", 2, ttl_seconds=5)
    clock.advance(4)

    assert memory_store.get("k") == 2


def test_delete_is_idempotent(memory_store) -> None:
    memory_store.put("k", 1, ttl_seconds=5)

    memory_store.delete("k")
    memory_store.delete("k")

    assert memory_store.get("k") is None


def test_list_keys_filters_by_prefix_and_skips_expired(memory_store, clock) -> None:
    memory_store.put("products:1", 1, ttl_seconds=100)
    memory_store.put("products:2", 2, ttl_seconds=1)
    memory_store.put("orders:1", 3, ttl_seconds=100)

    clock.advance(2)

    assert memory_store.list_keys("products:") == ["products:1"]
    assert sorted(memory_store.list_keys("")) == ["orders:1", "products:1"]


def test_invalid_ttl_rejected(memory_store) -> None:
    with pytest.raises(ValueError):
        memory_store.put("k", 1, ttl_seconds=0)


def test_non_json_value_rejected(memory_store) -> None:
    with pytest.raises(TypeError):
        memory_store.put("k", object(), ttl_seconds=10)


def test_thread_safety_under_concurrent_puts() -> None:
    store = InMemoryKeyValueStore()
    total_keys = 50

    def _writer(idx: int) -> None:
        store.put(f"k-{idx}", idx, ttl_seconds=30)

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store.list_keys("k-")) == total_keys
    assert store.get("k-25") == 25
