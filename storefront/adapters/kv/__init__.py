"""Key-value store adapters.

The rate limiter and the cache helper depend on the abstract store only, so
the backend (in-process dict or shared Redis) is chosen by configuration.
"""

from storefront.adapters.kv.base import AbstractKeyValueStore
from storefront.adapters.kv.factory import create_kv_store
from storefront.adapters.kv.in_memory import InMemoryKeyValueStore
from storefront.adapters.kv.redis_store import RedisKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_kv_store",
]
