# src/api_client_redis/infrastructure/caching/redis_store.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Redis Cache Store.

Synopsis:
    Adapter that implements the application CacheStorePort Protocol on top of
    the shared Redis client provided by `infrastructure/caching/redis_client.py`
    (or an injected one).

Design:
    * Pure JSON (utf-8) serialization; no pickle.
    * Keys arrive fully derived; this adapter never rewrites them.
    * Every Redis or serialization failure is raised as StoreError with the
      original exception chained. No retries here; the client's socket
      timeouts bound each call.
    * Each operation records latency and count metrics labelled with the
      store's namespace label.

Layer:
    infrastructure/caching

See Also:
    - api_client_redis.infrastructure.caching.redis_client
    - api_client_redis.application.interfaces.cache_store_port.CacheStorePort
"""

from __future__ import annotations

import json
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from typing import Any

from redis.exceptions import RedisError

from api_client_redis.application.interfaces.cache_store_port import CacheStorePort
from api_client_redis.config.settings import DEFAULT_CACHE_KEY_PREFIX
from api_client_redis.domain.exceptions.cache import StoreError
from api_client_redis.infrastructure.caching.redis_client import RedisClient, get_redis_client
from api_client_redis.infrastructure.observability.metrics import (
    get_cache_operation_duration_seconds,
    get_cache_operations_total,
)

__all__ = ["RedisCacheStore"]


def _text(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


class RedisCacheStore(CacheStorePort):
    """Redis-backed implementation of the CacheStorePort Protocol."""

    def __init__(
        self,
        client: RedisClient | None = None,
        *,
        namespace_label: str = DEFAULT_CACHE_KEY_PREFIX,
    ) -> None:
        """Initialize the store adapter.

        Args:
            client: Redis client. Defaults to the shared global client,
                resolved on each call.
            namespace_label: Metric label identifying this store.
        """
        self._client = client
        self._label = namespace_label

    def _redis(self) -> RedisClient:
        return self._client if self._client is not None else get_redis_client()

    # ------------------------------------------------------------------ #
    # Instrumentation
    # ------------------------------------------------------------------ #
    @asynccontextmanager
    async def _observe(self, operation: str, key: str) -> AsyncIterator[dict[str, str]]:
        """Time one store call, translate failures, and record metrics.

        Yields:
            A mutable label dict; set ``"hit"`` to ``"true"``/``"false"``.
        """
        labels = {"hit": "n/a"}
        start = time.perf_counter()
        try:
            yield labels
        except RedisError as exc:
            raise StoreError(
                f"redis {operation} failed",
                details={"operation": operation, "key": key},
            ) from exc
        finally:
            duration = time.perf_counter() - start
            with suppress(Exception):
                get_cache_operation_duration_seconds().labels(
                    operation=operation,
                    namespace=self._label,
                    hit=labels["hit"],
                ).observe(duration)
                get_cache_operations_total().labels(
                    operation=operation,
                    namespace=self._label,
                    hit=labels["hit"],
                ).inc()

    # ------------------------------------------------------------------ #
    # CacheStorePort implementation
    # ------------------------------------------------------------------ #
    async def get(self, key: str) -> Any | None:
        """Get and deserialize the JSON value under ``key``.

        Returns:
            The value if present, else ``None``.

        Raises:
            StoreError: On Redis failure or a payload that is not valid JSON.
        """
        async with self._observe("get", key) as labels:
            labels["hit"] = "false"
            raw = await self._redis().get(key)
            if raw is None:
                return None
            try:
                value = json.loads(raw)
            except ValueError as exc:
                raise StoreError(
                    "cached payload is not valid JSON",
                    details={"operation": "get", "key": key},
                ) from exc
            labels["hit"] = "true"
            return value

    async def set(self, key: str, value: Any, *, ttl: int) -> None:
        """Serialize ``value`` to JSON and store it with a TTL in seconds.

        Raises:
            StoreError: On Redis failure or a non-serializable value.
        """
        async with self._observe("set", key):
            try:
                payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
            except (TypeError, ValueError) as exc:
                raise StoreError(
                    "value is not JSON-serializable",
                    details={"operation": "set", "key": key},
                ) from exc
            await self._redis().set(key, payload, ex=ttl)

    async def delete(self, *keys: str) -> int:
        """Delete ``keys`` with one ``DEL`` and return how many existed."""
        if not keys:
            return 0
        async with self._observe("delete", keys[0]):
            return int(await self._redis().delete(*keys) or 0)

    async def smembers(self, key: str) -> set[str]:
        """Return the members of the set under ``key``."""
        async with self._observe("smembers", key):
            members = await self._redis().smembers(key)
            return {_text(m) for m in members or ()}

    async def sadd(self, key: str, *members: str) -> int:
        """Add ``members`` to the set under ``key``."""
        if not members:
            return 0
        async with self._observe("sadd", key):
            return int(await self._redis().sadd(key, *members) or 0)
