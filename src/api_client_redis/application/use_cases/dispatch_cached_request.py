# src/api_client_redis/application/use_cases/dispatch_cached_request.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Use case: Dispatch a request through the cache.

Synopsis:
    Entry point that sits between an API client wrapper and the remote API.

Responsibilities:
    * Reads: fingerprint the parameters, derive entry/index keys, and serve
      through the read-through cache.
    * Writes (create/update/delete): invalidate the affected index sets
      first; only when that succeeds, perform the mutation. An invalidation
      failure propagates and the mutation is never attempted, so a write can
      never leave possibly-stale cached reads behind unnoticed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from api_client_redis.application.interfaces.cache_store_port import CacheStorePort
from api_client_redis.application.services.fingerprint import fingerprint
from api_client_redis.application.services.invalidation import InvalidationTracker
from api_client_redis.application.services.key_deriver import KeyDeriver
from api_client_redis.application.services.read_through import ReadThroughCache
from api_client_redis.domain.entities.cache_namespace import CacheNamespace, EntityKey
from api_client_redis.domain.entities.entity_cache_config import validate_ttl
from api_client_redis.domain.enums.cache import OperationKind
from api_client_redis.domain.exceptions.cache import ConfigurationError, FetchError
from api_client_redis.infrastructure.logging.logger import get_json_logger
from api_client_redis.types import RequestCallback

__all__ = ["CacheAwareDispatcher", "coerce_operation"]

logger = get_json_logger(__name__)


def coerce_operation(operation: OperationKind | str) -> OperationKind:
    """Return ``operation`` as an :class:`OperationKind`.

    Raises:
        ConfigurationError: For unknown operation names.
    """
    try:
        return OperationKind(operation)
    except ValueError as exc:
        raise ConfigurationError(
            f"unsupported operation {operation!r}",
            details={"operation": str(operation)},
        ) from exc


class CacheAwareDispatcher:
    """Routes reads through the cache and busts the cache before writes."""

    def __init__(
        self,
        namespace: CacheNamespace,
        ttl: int,
        store: CacheStorePort,
        *,
        read_through: ReadThroughCache | None = None,
        invalidation: InvalidationTracker | None = None,
        strict_index: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            namespace: Key scope (prefix, user, entity class).
            ttl: Entry time-to-live in seconds. Required and positive.
            store: Backing store.
            read_through: Optional shared read-through cache.
            invalidation: Optional pre-built tracker (must use ``namespace``).
            strict_index: Passed to a newly built read-through cache.

        Raises:
            ConfigurationError: If the TTL or store is missing.
        """
        self._ttl = validate_ttl(ttl)
        self._keys = KeyDeriver(namespace)
        self._read_through = read_through or ReadThroughCache(store, strict_index=strict_index)
        self._invalidation = invalidation or InvalidationTracker(store, self._keys)

    @property
    def namespace(self) -> CacheNamespace:
        return self._keys.namespace

    @property
    def keys(self) -> KeyDeriver:
        return self._keys

    @property
    def read_through(self) -> ReadThroughCache:
        return self._read_through

    @property
    def invalidation(self) -> InvalidationTracker:
        return self._invalidation

    async def handle(
        self,
        operation: OperationKind | str,
        entity_key: EntityKey,
        request_params: Mapping[str, Any] | None,
        fetch: RequestCallback,
    ) -> Any:
        """Dispatch one request.

        Args:
            operation: Read, create, update or delete.
            entity_key: Model (with id, when known) or collection.
            request_params: Request data and headers; fingerprinted on reads.
            fetch: Coroutine performing the underlying request with the params.

        Returns:
            The cached or remote response payload.

        Raises:
            ConfigurationError: Unknown operation or an id-less model read.
            StoreError: Cache lookup failed.
            FetchError: The underlying request failed.
            InvalidationError: A write could not bust the cache; ``fetch``
                was not called.
        """
        op = coerce_operation(operation)
        params: Mapping[str, Any] = request_params or {}

        if op is OperationKind.READ:
            return await self._read(entity_key, params, fetch)

        targets = self._invalidation.targets_for(op, entity_key.entity_id)
        await self._invalidation.invalidate(targets)
        logger.debug(
            "cache busted; performing mutation",
            extra={"operation": op, "entity_class": self.namespace.entity_class},
        )
        try:
            return await fetch(params)
        except FetchError:
            raise
        except Exception as exc:
            raise FetchError(
                f"{op.value} request failed",
                details={"operation": op.value},
            ) from exc

    async def clear(self, operation: OperationKind | str, entity_key: EntityKey) -> int:
        """Bust caches a write of ``operation`` on ``entity_key`` would bust."""
        op = coerce_operation(operation)
        return await self._invalidation.invalidate(
            self._invalidation.targets_for(op, entity_key.entity_id)
        )

    async def _read(
        self,
        entity_key: EntityKey,
        params: Mapping[str, Any],
        fetch: RequestCallback,
    ) -> Any:
        fp = fingerprint(params)

        async def load() -> Any:
            return await fetch(params)

        return await self._read_through.get(
            self._keys.entry_key_for(entity_key, fp),
            self._keys.index_key_for(entity_key),
            fp,
            self._ttl,
            load,
            entity_class=self.namespace.entity_class,
        )
