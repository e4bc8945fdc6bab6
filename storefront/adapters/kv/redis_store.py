"""Redis-backed key-value store.

Shared between all workers and hosts that point at the same Redis, which is
what makes rate limits hold across processes. Values are JSON-encoded
strings written with ``SET key value EX ttl``.

The store offers no read-modify-write atomicity to its callers: two workers
can read the same value and both overwrite it. Consumers accept that.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import redis
from redis.exceptions import RedisError

from storefront.adapters.kv.base import AbstractKeyValueStore
from storefront.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(prefix: str) -> str:
    """Escape Redis glob metacharacters so prefixes match literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class RedisKeyValueStore(AbstractKeyValueStore):
    """Key-value store on top of a synchronous redis-py client."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        namespace: str | None = None,
        scan_count: int = 500,
    ) -> None:
        """Wrap an existing Redis client.

        Args:
            client: redis-py client created with ``decode_responses=True``.
            namespace: Optional prefix isolating this application's keys in a
                shared Redis database.
            scan_count: COUNT hint passed to SCAN when listing keys.
        """
        self._client = client
        self._namespace = f"{namespace}:" if namespace else ""
        self._scan_count = scan_count

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        namespace: str | None = None,
        socket_timeout_seconds: float = 2.0,
    ) -> "RedisKeyValueStore":
        client = redis.Redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=socket_timeout_seconds,
            socket_timeout=socket_timeout_seconds,
        )
        return cls(client, namespace=namespace)

    def get(self, key: str) -> Any | None:
        raw = self._call("get", self._qualify(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.error(
                "kv.payload_invalid",
                extra={"key_prefix": key.split(":", 1)[0], "error_type": type(exc).__name__},
            )
            raise StoreUnavailableError(
                code="store_payload_invalid",
                message="Stored value could not be decoded",
                details={"backend": "redis", "error_type": type(exc).__name__},
            ) from exc

    def put(self, key: str, value: Any, *, ttl_seconds: int) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        self._call("set", self._qualify(key), json.dumps(value), ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._call("delete", self._qualify(key))

    def list_keys(self, prefix: str) -> list[str]:
        pattern = _escape_glob(self._qualify(prefix)) + "*"
        try:
            keys = list(self._client.scan_iter(match=pattern, count=self._scan_count))
        except RedisError as exc:
            raise self._unavailable("scan", exc) from exc
        return [key[len(self._namespace):] for key in keys]

    def _qualify(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def _call(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        try:
            return getattr(self._client, operation)(*args, **kwargs)
        except RedisError as exc:
            raise self._unavailable(operation, exc) from exc

    @staticmethod
    def _unavailable(operation: str, exc: RedisError) -> StoreUnavailableError:
        logger.error(
            "kv.redis_error",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )
        return StoreUnavailableError(
            code="store_unavailable",
            message="Key-value store is unavailable",
            details={"backend": "redis", "error_type": type(exc).__name__},
        )
