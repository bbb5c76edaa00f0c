# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Set-based cache invalidation.

Synopsis:
    Every populated entry records its fingerprint in the entity's index set.
    On write, each relevant index set is read with ``SMEMBERS``, its
    fingerprints are mapped back to entry keys, and the entries are removed with
    one ``DEL``. The index set itself is kept: a read that populates between
    ``SMEMBERS`` and ``DEL`` adds its fingerprint to the same set, where the
    next invalidation still finds it. Stale fingerprints are harmless; deleting
    an absent key is a no-op. The store is never pattern-scanned,
    which keeps this usable behind sharding proxies that lack ``KEYS``/``SCAN``.

Design:
    * Branches (model index, collection index) run concurrently and always
      run to completion.
    * Any failing branch fails the whole call with :class:`InvalidationError`,
      even if sibling deletes already executed. Callers must treat that as
      "invalidation not guaranteed".
    * Creates only touch the collection index; there is no id to bust yet.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from api_client_redis.application.interfaces.cache_store_port import CacheStorePort
from api_client_redis.application.services.key_deriver import KeyDeriver
from api_client_redis.domain.entities.cache_namespace import EntityId, EntityKey
from api_client_redis.domain.enums.cache import EntityKind, OperationKind
from api_client_redis.domain.exceptions.cache import ConfigurationError, InvalidationError
from api_client_redis.infrastructure.logging.logger import get_json_logger
from api_client_redis.infrastructure.observability.metrics import record_invalidation

__all__ = ["InvalidationTracker"]

logger = get_json_logger(__name__)


class InvalidationTracker:
    """Busts every cached entry recorded in an entity's index sets."""

    def __init__(self, store: CacheStorePort, key_deriver: KeyDeriver) -> None:
        if store is None:
            raise ConfigurationError(
                "a cache store is required for invalidation",
                details={"missing": "store"},
            )
        self._store = store
        self._keys = key_deriver

    @staticmethod
    def targets_for(operation: OperationKind, entity_id: EntityId | None = None) -> list[EntityKey]:
        """Return the entity keys whose caches a write of ``operation`` must bust.

        Args:
            operation: Dispatched operation.
            entity_id: Id of the written model, when known.

        Returns:
            list[EntityKey]: Empty for reads; collection only for creates or
            id-less writes; model and collection otherwise.
        """
        operation = OperationKind(operation)
        if operation is OperationKind.READ:
            return []
        targets: list[EntityKey] = []
        if operation is not OperationKind.CREATE and entity_id is not None and str(entity_id):
            targets.append(EntityKey.model(entity_id))
        targets.append(EntityKey.collection())
        return targets

    async def invalidate(self, targets: Iterable[EntityKey]) -> int:
        """Delete all cached entries indexed under ``targets``.

        Args:
            targets: Entity keys to bust; each maps to one index set.

        Returns:
            int: Number of entry keys targeted for deletion.

        Raises:
            InvalidationError: If enumerating or deleting any index failed.
        """
        unique = list(dict.fromkeys(targets))
        if not unique:
            return 0

        namespace = self._keys.namespace
        index_keys = [self._keys.index_key_for(t) for t in unique]
        branches = [
            self._bust(target, index_key)
            for target, index_key in zip(unique, index_keys, strict=True)
        ]
        results = await asyncio.gather(
            *branches,
            return_exceptions=True,
        )

        failures = [
            (index_key, result)
            for index_key, result in zip(index_keys, results, strict=True)
            if isinstance(result, BaseException)
        ]
        if failures:
            record_invalidation(namespace.entity_class, ok=False)
            failed_keys = [key for key, _ in failures]
            logger.error(
                "cache invalidation failed",
                extra={
                    "index_keys": failed_keys,
                    "entity_class": namespace.entity_class,
                    "user": namespace.user,
                },
            )
            first = failures[0][1]
            if not isinstance(first, Exception):
                # Cancellation and interpreter exits are not ours to wrap.
                raise first
            raise InvalidationError(
                "cache invalidation not guaranteed; refusing to proceed",
                details={"failed_index_keys": failed_keys},
            ) from first

        deleted = sum(r for r in results if isinstance(r, int))
        record_invalidation(namespace.entity_class, ok=True)
        logger.info(
            "cache invalidated",
            extra={
                "index_keys": index_keys,
                "entity_class": namespace.entity_class,
                "user": namespace.user,
                "deleted": deleted,
            },
        )
        return deleted

    async def _bust(self, target: EntityKey, index_key: str) -> int:
        fingerprints = await self._store.smembers(index_key)
        if not fingerprints:
            return 0

        entity_id = target.entity_id if target.kind is EntityKind.MODEL else None
        entry_keys = [
            self._keys.entry_key(target.kind, entity_id, fp) for fp in sorted(fingerprints)
        ]
        await self._store.delete(*entry_keys)
        return len(entry_keys)
