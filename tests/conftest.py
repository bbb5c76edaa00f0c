# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator

import fakeredis
import fakeredis.aioredis
import pytest

from api_client_redis.config.settings import get_settings
from api_client_redis.infrastructure.caching import redis_client as redis_client_module
from api_client_redis.infrastructure.caching.redis_store import RedisCacheStore
from tests.fixtures.cache_testkit import RecordingApiClient, RecordingStore


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point settings at a test Redis database and reset the singleton."""
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/15")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> fakeredis.aioredis.FakeRedis:
    """Isolated fake Redis wired into the global client used by the store."""
    fake = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    return fake


@pytest.fixture
def redis_store(fake_redis: fakeredis.aioredis.FakeRedis) -> RedisCacheStore:
    return RedisCacheStore(fake_redis, namespace_label="test")


@pytest.fixture
def memory_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def api_client() -> RecordingApiClient:
    return RecordingApiClient()
