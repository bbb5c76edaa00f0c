# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Read-through cache.

Synopsis:
    On read, return the stored value when present; otherwise call the
    loader, store its result with a TTL and record the request fingerprint in
    the entity's index set so a later write can find and bust the entry.

Design:
    * No lock around check/fetch/store. Concurrent misses on one key may each
      fetch; the overwrite is idempotent because every writer stores the same
      authoritative value for the same key.
    * Loader failures are wrapped in :class:`FetchError` and leave the store
      untouched.
    * Population (``set`` then ``sadd``) is best-effort: failures are logged
      and counted, and the fetched value is still returned. ``strict_index``
      turns a failed ``sadd`` into a :class:`StoreError` and first deletes
      the just-written entry, since an entry missing from its index cannot be
      invalidated.

Layer:
    application/services
"""

from __future__ import annotations

from typing import Any

from api_client_redis.application.interfaces.cache_store_port import CacheStorePort
from api_client_redis.domain.entities.entity_cache_config import validate_ttl
from api_client_redis.domain.exceptions.cache import ConfigurationError, FetchError, StoreError
from api_client_redis.infrastructure.logging.logger import get_json_logger
from api_client_redis.infrastructure.observability.metrics import (
    record_lookup,
    record_population_failure,
)
from api_client_redis.types import Loader

__all__ = ["ReadThroughCache"]

logger = get_json_logger(__name__)


class ReadThroughCache:
    """Read-through cache over a :class:`CacheStorePort`."""

    def __init__(self, store: CacheStorePort, *, strict_index: bool = False) -> None:
        """Initialize the cache.

        Args:
            store: Backing store.
            strict_index: Raise instead of logging when the index update fails.
        """
        if store is None:
            raise ConfigurationError(
                "a cache store is required for read-through caching",
                details={"missing": "store"},
            )
        self._store = store
        self._strict_index = strict_index

    @property
    def store(self) -> CacheStorePort:
        return self._store

    async def get(
        self,
        entry_key: str,
        index_key: str,
        fingerprint: str,
        ttl: int,
        fetch: Loader,
        *,
        entity_class: str = "unknown",
    ) -> Any:
        """Return the cached value for ``entry_key`` or populate it from ``fetch``.

        Args:
            entry_key: Key the value is stored under.
            index_key: Set recording fingerprints cached for the entity.
            fingerprint: Fingerprint component of ``entry_key``.
            ttl: Entry time-to-live in seconds.
            fetch: Zero-arg coroutine returning the authoritative value.
            entity_class: Metric/log label.

        Returns:
            The cached or freshly fetched value.

        Raises:
            ConfigurationError: If ``ttl`` is not a positive integer.
            StoreError: If the lookup fails, or the index update fails in
                strict mode.
            FetchError: If ``fetch`` fails.
        """
        ttl = validate_ttl(ttl)
        context = {"cache_key": entry_key, "entity_class": entity_class}

        cached = await self._store.get(entry_key)
        if cached is not None:
            record_lookup(entity_class, hit=True)
            logger.debug("cache hit", extra=context)
            return cached

        record_lookup(entity_class, hit=False)
        logger.debug("cache miss", extra=context)

        try:
            value = await fetch()
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(
                "authoritative fetch failed; cache left untouched",
                details={"cache_key": entry_key},
            ) from exc

        if value is None:
            return None

        await self._populate(entry_key, index_key, fingerprint, ttl, value, entity_class)
        return value

    async def _populate(
        self,
        entry_key: str,
        index_key: str,
        fingerprint: str,
        ttl: int,
        value: Any,
        entity_class: str,
    ) -> None:
        context = {"cache_key": entry_key, "index_key": index_key, "entity_class": entity_class}

        try:
            await self._store.set(entry_key, value, ttl=ttl)
        except StoreError:
            # Nothing was cached, so the index has nothing to point at.
            record_population_failure(entity_class, "set")
            logger.warning(
                "cache set failed; returning fetched value", extra=context, exc_info=True
            )
            return

        try:
            await self._store.sadd(index_key, fingerprint)
        except StoreError:
            record_population_failure(entity_class, "sadd")
            if self._strict_index:
                await self._discard_unindexed(entry_key, context)
                raise
            logger.warning(
                "cache index update failed; entry cannot be invalidated before TTL expiry",
                extra=context,
                exc_info=True,
            )

    async def _discard_unindexed(self, entry_key: str, context: dict[str, str]) -> None:
        try:
            await self._store.delete(entry_key)
        except StoreError:
            logger.error(
                "could not remove unindexed cache entry; it stays until TTL expiry",
                extra=context,
                exc_info=True,
            )
