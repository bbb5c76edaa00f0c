# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Cache key derivation. Single place for key format.

Key families, all under ``{prefix}:{user}-{entity_class}``:

    model entry        ...-model-{id}-{fingerprint}
    model index        ...-hashes-model-{id}
    collection entry   ...-collection-{fingerprint}
    collection index   ...-hashes-collection

Index sets store bare fingerprints; :meth:`KeyDeriver.entry_key` turns them
back into entry keys during invalidation, so index and entry keys must come
from the same deriver. There is one collection index per namespace: every
cached query shape of a collection is busted together.

The stored layout is a compatibility contract with entries already in Redis.
Never change it without also changing the key shape in a significant way.
"""

from __future__ import annotations

from api_client_redis.domain.entities.cache_namespace import CacheNamespace, EntityId, EntityKey
from api_client_redis.domain.enums.cache import EntityKind
from api_client_redis.domain.exceptions.cache import ConfigurationError

__all__ = ["KeyDeriver"]


class KeyDeriver:
    """Builds entry and index keys for one :class:`CacheNamespace`."""

    def __init__(self, namespace: CacheNamespace) -> None:
        if not isinstance(namespace, CacheNamespace):
            raise ConfigurationError(
                "a CacheNamespace is required to derive cache keys",
                details={"missing": "namespace"},
            )
        self._namespace = namespace
        self._base = namespace.base

    @property
    def namespace(self) -> CacheNamespace:
        return self._namespace

    def entry_key(self, kind: EntityKind, entity_id: EntityId | None, fingerprint: str) -> str:
        """Return the key a cached response is stored under.

        Raises:
            ConfigurationError: If a model has no id, a collection has one,
                or the fingerprint is empty.
        """
        if not fingerprint:
            raise ConfigurationError(
                "a request fingerprint is required to derive an entry key",
                details={"missing": "fingerprint"},
            )
        kind = EntityKind(kind)
        if kind is EntityKind.MODEL:
            return f"{self._base}-model-{self._model_id(entity_id)}-{fingerprint}"
        self._reject_collection_id(entity_id)
        return f"{self._base}-collection-{fingerprint}"

    def index_key(self, kind: EntityKind, entity_id: EntityId | None = None) -> str:
        """Return the key of the set tracking fingerprints cached for an entity."""
        kind = EntityKind(kind)
        if kind is EntityKind.MODEL:
            return f"{self._base}-hashes-model-{self._model_id(entity_id)}"
        self._reject_collection_id(entity_id)
        return f"{self._base}-hashes-collection"

    def entry_key_for(self, entity_key: EntityKey, fingerprint: str) -> str:
        return self.entry_key(entity_key.kind, entity_key.entity_id, fingerprint)

    def index_key_for(self, entity_key: EntityKey) -> str:
        return self.index_key(entity_key.kind, entity_key.entity_id)

    @staticmethod
    def _model_id(entity_id: EntityId | None) -> str:
        text = "" if entity_id is None else str(entity_id)
        if not text:
            raise ConfigurationError(
                "model keys require an entity id",
                details={"missing": "entity_id"},
            )
        return text

    @staticmethod
    def _reject_collection_id(entity_id: EntityId | None) -> None:
        if entity_id is not None:
            raise ConfigurationError(
                "collection keys are not scoped by id",
                details={"entity_id": str(entity_id)},
            )
