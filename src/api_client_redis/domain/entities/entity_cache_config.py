# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Entity Cache Configuration

Purpose:
    Per entity-type cache settings supplied once, at construction time:
    the entity class tag used in keys, the TTL of cached entries and whether
    the entity is singular (model) or plural (collection).

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass

from api_client_redis.domain.enums.cache import EntityKind
from api_client_redis.domain.exceptions.cache import ConfigurationError

from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class EntityCacheConfig(BaseEntity):
    """Cache settings for one entity type.

    Args:
        entity_class: Entity class tag, e.g. ``"comment"``.
        ttl: Entry time-to-live in seconds. Required and positive.
        kind: Model or collection.

    Raises:
        ConfigurationError: If the tag is empty or the TTL is missing or
            not a positive integer.
    """

    entity_class: str
    ttl: int
    kind: EntityKind = EntityKind.MODEL

    def __post_init__(self) -> None:
        object.__setattr__(self, "entity_class", self._require(self.entity_class, "entity_class"))
        object.__setattr__(self, "ttl", validate_ttl(self.ttl))
        object.__setattr__(self, "kind", EntityKind(self.kind))

    @classmethod
    def for_model(cls, entity_class: str, ttl: int) -> EntityCacheConfig:
        return cls(entity_class=entity_class, ttl=ttl, kind=EntityKind.MODEL)

    @classmethod
    def for_collection(
        cls,
        *,
        model: EntityCacheConfig | None = None,
        entity_class: str | None = None,
        ttl: int | None = None,
    ) -> EntityCacheConfig:
        """Build a collection config, inheriting unset values from its model.

        Args:
            model: Config of the singular entity held by the collection.
            entity_class: Explicit tag; falls back to ``model.entity_class``.
            ttl: Explicit TTL; falls back to ``model.ttl``.

        Returns:
            EntityCacheConfig: Collection-kind config.

        Raises:
            ConfigurationError: If a value is unset on both the collection
                and the model.
        """
        if model is not None and model.kind is not EntityKind.MODEL:
            raise ConfigurationError(
                "collection settings can only be inherited from a model config",
                details={"kind": model.kind.value},
            )
        resolved_class = entity_class if entity_class else (model.entity_class if model else None)
        resolved_ttl = ttl if ttl is not None else (model.ttl if model else None)
        if not resolved_class or resolved_ttl is None:
            missing = "entity_class" if not resolved_class else "ttl"
            raise ConfigurationError(
                f"collection `{missing}` is not set and no model config provides it",
                details={"missing": missing},
            )
        return cls(entity_class=resolved_class, ttl=resolved_ttl, kind=EntityKind.COLLECTION)


def validate_ttl(ttl: object) -> int:
    """Return ``ttl`` if it is a positive integer number of seconds.

    Raises:
        ConfigurationError: If the TTL is missing, boolean, non-integer or
            not positive.
    """
    if ttl is None:
        raise ConfigurationError("cache `ttl` is required", details={"missing": "ttl"})
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
        raise ConfigurationError(
            "cache `ttl` must be a positive integer number of seconds",
            details={"ttl": repr(ttl)},
        )
    return ttl
