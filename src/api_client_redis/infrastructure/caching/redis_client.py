# src/api_client_redis/infrastructure/caching/redis_client.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Async Redis client factory and shared-client accessors."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING, Any, TypeAlias, Protocol, cast, runtime_checkable

import redis.asyncio as aioredis

# -----------------------------------------------------------------------------
# Some redis stubs make Redis generic (e.g., Redis[str]).
# -----------------------------------------------------------------------------
if TYPE_CHECKING:
    from redis.asyncio.client import Redis as _RedisGeneric

    AioredisRedis: TypeAlias = _RedisGeneric[str]
else:
    from redis.asyncio.client import Redis as AioredisRedis  # type: ignore[assignment]

from api_client_redis.config.settings import Settings, get_settings

__all__ = [
    "RedisClient",
    "close_redis",
    "get_redis_client",
    "init_redis",
    "redis_dependency",
]


@runtime_checkable
class RedisClient(Protocol):
    """Minimal async Redis protocol used by the cache store."""

    async def ping(self) -> Any: ...
    async def close(self) -> None: ...

    async def get(self, key: str) -> Any: ...
    async def set(
        self,
        key: str,
        value: Any,
        *,
        ex: int | None = None,
        px: int | None = None,
        nx: bool | None = None,
        xx: bool | None = None,
    ) -> Any: ...
    async def delete(self, *keys: str) -> Any: ...
    async def smembers(self, key: str) -> Any: ...
    async def sadd(self, key: str, *members: str) -> Any: ...


_client: RedisClient | None = None


def _create_aioredis_client(settings: Settings) -> AioredisRedis:
    """Build the concrete asyncio Redis client from settings."""
    # Untyped shim so mypy won't care whether redis stubs type `from_url`.
    _from_url: Any = aioredis.from_url
    client = _from_url(
        url=settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        health_check_interval=settings.redis_health_check_interval_s,
        socket_timeout=settings.redis_socket_timeout_s,
        socket_connect_timeout=settings.redis_socket_connect_timeout_s,
    )
    return cast(AioredisRedis, client)


def init_redis(settings: Settings) -> None:
    """Initialize the global async Redis client (idempotent)."""
    global _client
    if _client is not None:
        return
    _client = cast(RedisClient, _create_aioredis_client(settings))


async def close_redis() -> None:
    """Close the global Redis client at shutdown."""
    global _client
    if _client is not None:
        with suppress(RuntimeError):
            await _client.close()
        _client = None


def get_redis_client() -> RedisClient:
    """Return the initialized Redis client (lazy-inits from settings)."""
    global _client
    if _client is None:
        init_redis(get_settings())
    if _client is None:
        raise RuntimeError("Redis client not initialized (init_redis failed)")
    return _client


@asynccontextmanager
async def redis_dependency() -> AsyncGenerator[RedisClient, None]:
    """Yield the shared Redis client for DI."""
    yield get_redis_client()
