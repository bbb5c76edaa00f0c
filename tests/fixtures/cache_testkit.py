"""
Cache Test Kit (Unit fixtures & helpers)

Purpose:
    In-memory stand-ins for the cache store port, the loader callback and
    the remote API client, so the application layer can be tested without
    Redis.

Layer: tests/fixtures

Notes:
    - Pure-Python; no network dependencies.
    - ``RecordingStore.fail_on`` makes named operations raise StoreError.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from api_client_redis.domain.enums.cache import OperationKind
from api_client_redis.domain.exceptions.cache import StoreError


class RecordingStore:
    """In-memory store stub that tracks values, TTLs, index sets and calls."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}
        self.sets: dict[str, set[str]] = {}
        self.fail_on: set[str] = set()
        self.deletes: list[tuple[str, ...]] = []

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise StoreError(f"{op} failed", details={"operation": op})

    async def get(self, key: str) -> Any | None:
        self._maybe_fail("get")
        return self.data.get(key)

    async def set(self, key: str, value: Any, *, ttl: int) -> None:
        self._maybe_fail("set")
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys: str) -> int:
        self._maybe_fail("delete")
        self.deletes.append(keys)
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None or self.sets.pop(key, None) is not None:
                removed += 1
        return removed

    async def smembers(self, key: str) -> set[str]:
        self._maybe_fail("smembers")
        return set(self.sets.get(key, set()))

    async def sadd(self, key: str, *members: str) -> int:
        self._maybe_fail("sadd")
        bucket = self.sets.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before


class CountingLoader:
    """Zero-arg async loader that counts calls and returns or raises."""

    def __init__(self, value: Any = None, exc: Exception | None = None) -> None:
        self.calls = 0
        self.value = {"id": 1, "body": "hi"} if value is None and exc is None else value
        self.exc = exc

    async def __call__(self) -> Any:
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return self.value


class RecordingApiClient:
    """API client stub that records calls and serves versioned responses.

    Every mutation bumps ``version`` so a stale cached read is detectable.
    """

    def __init__(self, responses: Mapping[OperationKind, Any] | None = None) -> None:
        self.calls: list[tuple[OperationKind, dict[str, Any]]] = []
        self.responses: dict[OperationKind, Any] = dict(responses or {})
        self.version = 0
        self.fail_with: Exception | None = None

    async def call(self, operation: OperationKind, params: Mapping[str, Any]) -> Any:
        self.calls.append((operation, dict(params)))
        if self.fail_with is not None:
            raise self.fail_with
        if operation is not OperationKind.READ:
            self.version += 1
        if operation in self.responses:
            return self.responses[operation]
        return {"id": params.get("id"), "version": self.version, "params": dict(params)}

    def count(self, operation: OperationKind) -> int:
        return sum(1 for op, _ in self.calls if op is operation)
