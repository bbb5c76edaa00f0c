# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Cache Namespace and Entity Key

Purpose:
    Immutable identity tuples that scope every cache key to one key prefix,
    one requesting user and one entity class, and identify a single model or
    a whole collection within that scope.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from api_client_redis.domain.enums.cache import EntityKind
from api_client_redis.domain.exceptions.cache import ConfigurationError

from .base import BaseEntity

EntityId: TypeAlias = str | int


@dataclass(frozen=True, slots=True)
class CacheNamespace(BaseEntity):
    """Per-user, per-entity-class key scope.

    Args:
        prefix: Fixed key prefix shared by the whole deployment.
        user: Identifier of the requesting user; keeps caches user-private.
        entity_class: Entity class tag, e.g. ``"comment"``.

    Raises:
        ConfigurationError: If any field is missing or empty.
    """

    prefix: str
    user: str
    entity_class: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "prefix", self._require(self.prefix, "prefix"))
        object.__setattr__(
            self,
            "user",
            self._require(
                self.user,
                "user",
                "A user identifier is needed so a user's cache is namespaced to them",
            ),
        )
        object.__setattr__(
            self,
            "entity_class",
            self._require(
                self.entity_class,
                "entity_class",
                "If this is a collection, configure it with its model's cache settings",
            ),
        )

    @property
    def base(self) -> str:
        """Shared key stem, e.g. ``api-client:u1-comment``."""
        return f"{self.prefix}:{self.user}-{self.entity_class}"


@dataclass(frozen=True, slots=True)
class EntityKey(BaseEntity):
    """Identifies one model instance, or a collection as a whole.

    Args:
        kind: Model or collection.
        entity_id: Model id. ``None`` for collections and for models that
            have not been created yet.

    Raises:
        ConfigurationError: If a collection key carries an id.
    """

    kind: EntityKind
    entity_id: EntityId | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EntityKind(self.kind))
        if self.kind is EntityKind.COLLECTION and self.entity_id is not None:
            raise ConfigurationError(
                "collections are keyed by fingerprint only and cannot carry an id",
                details={"entity_id": str(self.entity_id)},
            )

    @classmethod
    def model(cls, entity_id: EntityId | None = None) -> EntityKey:
        return cls(EntityKind.MODEL, entity_id)

    @classmethod
    def collection(cls) -> EntityKey:
        return cls(EntityKind.COLLECTION)

    @property
    def has_id(self) -> bool:
        return self.entity_id is not None and str(self.entity_id) != ""
