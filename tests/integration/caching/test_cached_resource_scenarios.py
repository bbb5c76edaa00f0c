# tests/integration/caching/test_cached_resource_scenarios.py
from __future__ import annotations

import asyncio

import fakeredis.aioredis
import pytest

from api_client_redis.adapters.gateways import CachedCollection, CachedModel
from api_client_redis.application.services.fingerprint import fingerprint
from api_client_redis.domain.entities.entity_cache_config import EntityCacheConfig
from api_client_redis.domain.enums.cache import OperationKind
from api_client_redis.domain.exceptions.cache import InvalidationError
from api_client_redis.infrastructure.caching.redis_store import RedisCacheStore
from tests.fixtures.cache_testkit import RecordingApiClient

MODEL_CFG = EntityCacheConfig.for_model("comment", 60)


def _collection(
    store: RedisCacheStore, client: RecordingApiClient, user: str = "u1"
) -> CachedCollection:
    return CachedCollection(
        user=user,
        api_client=client,
        store=store,
        model_config=MODEL_CFG,
        key_prefix="ns",
    )


@pytest.mark.asyncio
async def test_model_read_update_read_cycle(
    redis_store: RedisCacheStore,
    fake_redis: fakeredis.aioredis.FakeRedis,
    api_client: RecordingApiClient,
) -> None:
    model = _collection(redis_store, api_client).prepare_model(1)
    entry = f"ns:u1-comment-model-1-{fingerprint({'a': 1})}"

    first = await model.fetch({"a": 1})
    cached = await model.fetch({"a": 1})

    assert first == cached
    assert api_client.count(OperationKind.READ) == 1
    assert await fake_redis.exists(entry) == 1
    assert await fake_redis.smembers("ns:u1-comment-hashes-model-1") == {fingerprint({"a": 1})}

    await model.save({"body": "edited"})

    assert await fake_redis.exists(entry) == 0
    # The index set is kept and simply re-used by the next read.
    assert await fake_redis.exists("ns:u1-comment-hashes-model-1") == 1

    fresh = await model.fetch({"a": 1})
    assert api_client.count(OperationKind.READ) == 2
    assert fresh["version"] == 1
    assert first["version"] == 0


@pytest.mark.asyncio
async def test_all_collection_pages_are_busted_together(
    redis_store: RedisCacheStore,
    fake_redis: fakeredis.aioredis.FakeRedis,
    api_client: RecordingApiClient,
) -> None:
    collection = _collection(redis_store, api_client)
    await collection.fetch({"page": 1})
    await collection.fetch({"page": 2})
    assert await fake_redis.scard("ns:u1-comment-hashes-collection") == 2

    await collection.prepare_model(9).destroy()

    for page in (1, 2):
        key = f"ns:u1-comment-collection-{fingerprint({'page': page})}"
        assert await fake_redis.exists(key) == 0
    await collection.fetch({"page": 1})
    assert api_client.count(OperationKind.READ) == 3


@pytest.mark.asyncio
async def test_create_busts_collection_but_not_other_models(
    redis_store: RedisCacheStore,
    fake_redis: fakeredis.aioredis.FakeRedis,
    api_client: RecordingApiClient,
) -> None:
    collection = _collection(redis_store, api_client)
    existing = collection.prepare_model(1)
    await existing.fetch()
    await collection.fetch()

    await collection.prepare_model().save({"body": "new"})

    fp = fingerprint({})
    assert await fake_redis.exists(f"ns:u1-comment-collection-{fp}") == 0
    assert await fake_redis.exists(f"ns:u1-comment-model-1-{fp}") == 1
    await existing.fetch()
    assert api_client.count(OperationKind.READ) == 2


@pytest.mark.asyncio
async def test_users_never_share_entries(
    redis_store: RedisCacheStore, fake_redis: fakeredis.aioredis.FakeRedis
) -> None:
    alice_client, bob_client = RecordingApiClient(), RecordingApiClient()
    alice = _collection(redis_store, alice_client, user="alice").prepare_model(1)
    bob = _collection(redis_store, bob_client, user="bob").prepare_model(1)

    await alice.fetch({"a": 1})
    await bob.fetch({"a": 1})

    assert alice_client.count(OperationKind.READ) == 1
    assert bob_client.count(OperationKind.READ) == 1

    await alice.save({"body": "x"})

    assert await fake_redis.exists("ns:bob-comment-hashes-model-1") == 1
    await bob.fetch({"a": 1})
    assert bob_client.count(OperationKind.READ) == 1


@pytest.mark.asyncio
async def test_entries_expire_after_ttl(
    redis_store: RedisCacheStore, api_client: RecordingApiClient
) -> None:
    model = CachedModel(
        EntityCacheConfig.for_model("comment", 1),
        user="u1",
        api_client=api_client,
        store=redis_store,
        entity_id=1,
        key_prefix="ns",
    )

    await model.fetch()
    await model.fetch()
    assert api_client.count(OperationKind.READ) == 1

    await asyncio.sleep(1.1)

    await model.fetch()
    assert api_client.count(OperationKind.READ) == 2


@pytest.mark.asyncio
async def test_mutation_refused_when_index_is_unreadable(
    fake_redis: fakeredis.aioredis.FakeRedis, api_client: RecordingApiClient
) -> None:
    store = RedisCacheStore(fake_redis, namespace_label="test")
    model = _collection(store, api_client).prepare_model(1)
    await model.fetch()

    # Wrong type under the index key: SMEMBERS fails with WRONGTYPE.
    await fake_redis.delete("ns:u1-comment-hashes-model-1")
    await fake_redis.set("ns:u1-comment-hashes-model-1", "not-a-set")

    with pytest.raises(InvalidationError):
        await model.save({"body": "x"})

    assert api_client.count(OperationKind.UPDATE) == 0
