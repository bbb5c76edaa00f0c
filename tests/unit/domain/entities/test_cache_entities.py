# tests/unit/domain/entities/test_cache_entities.py
from __future__ import annotations

import dataclasses

import pytest

from api_client_redis.domain.entities.cache_namespace import CacheNamespace, EntityKey
from api_client_redis.domain.entities.entity_cache_config import EntityCacheConfig, validate_ttl
from api_client_redis.domain.enums.cache import EntityKind
from api_client_redis.domain.exceptions.base import CacheLayerError
from api_client_redis.domain.exceptions.cache import ConfigurationError


def test_namespace_base_and_immutability() -> None:
    ns = CacheNamespace(prefix="api-client", user=" 42 ", entity_class="comment")
    assert ns.user == "42"
    assert ns.base == "api-client:42-comment"
    with pytest.raises(dataclasses.FrozenInstanceError):
        ns.user = "other"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("field", "kwargs"),
    [
        ("prefix", {"prefix": "", "user": "u1", "entity_class": "comment"}),
        ("user", {"prefix": "ns", "user": None, "entity_class": "comment"}),
        ("user", {"prefix": "ns", "user": "   ", "entity_class": "comment"}),
        ("entity_class", {"prefix": "ns", "user": "u1", "entity_class": ""}),
    ],
)
def test_namespace_rejects_missing_fields(field: str, kwargs: dict) -> None:
    with pytest.raises(ConfigurationError) as info:
        CacheNamespace(**kwargs)
    assert info.value.details == {"missing": field}
    assert info.value.code == "CACHE_CONFIGURATION_ERROR"
    assert isinstance(info.value, CacheLayerError)


def test_entity_key_constructors() -> None:
    assert EntityKey.model(3) == EntityKey(EntityKind.MODEL, 3)
    assert EntityKey.model(3).has_id
    assert not EntityKey.model().has_id
    assert not EntityKey.model("").has_id
    assert EntityKey.collection().kind is EntityKind.COLLECTION
    assert EntityKey("collection").kind is EntityKind.COLLECTION


def test_collection_key_cannot_carry_id() -> None:
    with pytest.raises(ConfigurationError):
        EntityKey(EntityKind.COLLECTION, 1)


def test_model_config_requires_ttl_and_class() -> None:
    cfg = EntityCacheConfig.for_model("comment", 60)
    assert (cfg.entity_class, cfg.ttl, cfg.kind) == ("comment", 60, EntityKind.MODEL)
    with pytest.raises(ConfigurationError):
        EntityCacheConfig.for_model("", 60)
    with pytest.raises(ConfigurationError):
        EntityCacheConfig.for_model("comment", None)  # type: ignore[arg-type]


def test_collection_config_inherits_from_model() -> None:
    model = EntityCacheConfig.for_model("comment", 60)

    inherited = EntityCacheConfig.for_collection(model=model)
    assert (inherited.entity_class, inherited.ttl) == ("comment", 60)
    assert inherited.kind is EntityKind.COLLECTION

    overridden = EntityCacheConfig.for_collection(model=model, ttl=5)
    assert (overridden.entity_class, overridden.ttl) == ("comment", 5)


def test_collection_config_without_any_source_fails() -> None:
    with pytest.raises(ConfigurationError) as info:
        EntityCacheConfig.for_collection(entity_class="comment")
    assert info.value.details == {"missing": "ttl"}

    with pytest.raises(ConfigurationError) as info:
        EntityCacheConfig.for_collection(ttl=10)
    assert info.value.details == {"missing": "entity_class"}


def test_collection_config_cannot_inherit_from_collection() -> None:
    parent = EntityCacheConfig.for_collection(entity_class="comment", ttl=10)
    with pytest.raises(ConfigurationError):
        EntityCacheConfig.for_collection(model=parent)


@pytest.mark.parametrize("bad", [0, -1, 2.5, "60", True, None])
def test_validate_ttl_rejects_non_positive_integers(bad: object) -> None:
    with pytest.raises(ConfigurationError):
        validate_ttl(bad)


def test_validate_ttl_accepts_positive_integer() -> None:
    assert validate_ttl(1) == 1
