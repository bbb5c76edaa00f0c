# src/api_client_redis/application/interfaces/cache_store_port.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Store Port.

Synopsis:
    Minimal key-value + set behavior the cache layer needs from its backing
    store. Enables swapping Redis for in-memory fakes in tests.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStorePort(Protocol):
    """Async store with TTL'd values and string sets.

    Implementations must raise
    :class:`~api_client_redis.domain.exceptions.cache.StoreError` on any
    backend failure and must use ``None`` to signal an absent (or expired)
    key.
    """

    async def get(self, key: str) -> Any | None:
        """Return the deserialized value under ``key``, or ``None`` if absent.

        Args:
            key: Fully-qualified cache key.
        """

    async def set(self, key: str, value: Any, *, ttl: int) -> None:
        """Store ``value`` under ``key`` expiring after ``ttl`` seconds.

        Args:
            key: Fully-qualified cache key.
            value: JSON-serializable value.
            ttl: Time-to-live in seconds.
        """

    async def delete(self, *keys: str) -> int:
        """Delete ``keys`` in one batch and return how many existed."""

    async def smembers(self, key: str) -> set[str]:
        """Return all members of the set under ``key`` (empty if absent)."""

    async def sadd(self, key: str, *members: str) -> int:
        """Add ``members`` to the set under ``key`` and return how many were new."""
