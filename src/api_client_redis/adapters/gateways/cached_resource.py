# src/api_client_redis/adapters/gateways/cached_resource.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: cached API resources.

Wraps an :class:`ApiClientPort` for one resource type with per-user caching:

* :class:`CachedModel`: a single entity. ``fetch`` reads through the cache,
  ``save`` creates or updates, ``destroy`` deletes; writes bust the model's
  and the collection's cached reads first.
* :class:`CachedCollection`: the plural entity. ``fetch`` reads through the
  cache; :meth:`CachedCollection.prepare_model` hands out models that share
  its user, store and read-through cache.

Per-entity cache settings are explicit constructor arguments, resolved once.
The key prefix and the strict-index flag fall back to :func:`get_settings`,
whose fields all have defaults, so an injected store needs no environment.
Collections without their own settings inherit them from their model
config via :meth:`EntityCacheConfig.for_collection`.

Design principles:
    * The fingerprint covers the caller's data and headers; the model id is
      part of the key, not the fingerprint.
    * Non-create model calls send ``id`` to the transport ahead of the data.
    * A model without an id has nothing to key or bust individually, so its
      reads bypass the cache; its create still busts the collection.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from api_client_redis.application.interfaces.api_client_port import ApiClientPort
from api_client_redis.application.interfaces.cache_store_port import CacheStorePort
from api_client_redis.application.services.fingerprint import build_request_params
from api_client_redis.application.services.read_through import ReadThroughCache
from api_client_redis.application.use_cases.dispatch_cached_request import CacheAwareDispatcher
from api_client_redis.config.settings import get_settings
from api_client_redis.domain.entities.cache_namespace import CacheNamespace, EntityId, EntityKey
from api_client_redis.domain.entities.entity_cache_config import EntityCacheConfig
from api_client_redis.domain.enums.cache import EntityKind, OperationKind
from api_client_redis.domain.exceptions.cache import ConfigurationError, FetchError
from api_client_redis.infrastructure.logging.logger import get_json_logger

__all__ = ["CachedCollection", "CachedModel"]

logger = get_json_logger(__name__)


class _CachedResource:
    """Shared wiring: namespace, dispatcher and transport."""

    _expected_kind: EntityKind

    def __init__(
        self,
        config: EntityCacheConfig,
        *,
        user: str | int | None,
        api_client: ApiClientPort | None,
        store: CacheStorePort | None,
        key_prefix: str | None = None,
        read_through: ReadThroughCache | None = None,
        strict_index: bool | None = None,
    ) -> None:
        if not isinstance(config, EntityCacheConfig):
            raise ConfigurationError(
                "cached resources require an EntityCacheConfig",
                details={"missing": "config"},
            )
        if config.kind is not self._expected_kind:
            raise ConfigurationError(
                f"{type(self).__name__} requires a {self._expected_kind.value} config",
                details={"kind": config.kind.value},
            )
        if api_client is None:
            raise ConfigurationError(
                "an API client is required for cached resources",
                details={"missing": "api_client"},
            )
        if store is None:
            raise ConfigurationError(
                "a cache store is required for cached resources",
                details={"missing": "store"},
            )

        if key_prefix is None or strict_index is None:
            try:
                settings = get_settings()
            except RuntimeError as exc:
                raise ConfigurationError(
                    "cache settings are invalid; pass key_prefix and strict_index explicitly",
                    details={"invalid": "settings"},
                ) from exc
            key_prefix = settings.cache_key_prefix if key_prefix is None else key_prefix
            strict_index = settings.cache_strict_index if strict_index is None else strict_index

        self._config = config
        self._api_client = api_client
        self._store = store
        self._key_prefix = key_prefix
        self._strict_index = strict_index
        self._namespace = CacheNamespace(
            prefix=key_prefix,
            user="" if user is None else str(user),
            entity_class=config.entity_class,
        )
        self._dispatcher = CacheAwareDispatcher(
            self._namespace,
            config.ttl,
            store,
            read_through=read_through,
            strict_index=strict_index,
        )

    @property
    def config(self) -> EntityCacheConfig:
        return self._config

    @property
    def namespace(self) -> CacheNamespace:
        return self._namespace

    @property
    def user(self) -> str:
        return self._namespace.user

    @property
    def store(self) -> CacheStorePort:
        return self._store

    @property
    def dispatcher(self) -> CacheAwareDispatcher:
        return self._dispatcher

    async def _call_api(self, operation: OperationKind, params: Mapping[str, Any]) -> Any:
        return await self._api_client.call(operation, params)


class CachedModel(_CachedResource):
    """Single entity backed by a cached API client."""

    _expected_kind = EntityKind.MODEL

    def __init__(
        self,
        config: EntityCacheConfig,
        *,
        user: str | int | None,
        api_client: ApiClientPort | None,
        store: CacheStorePort | None,
        entity_id: EntityId | None = None,
        key_prefix: str | None = None,
        read_through: ReadThroughCache | None = None,
        strict_index: bool | None = None,
    ) -> None:
        """Initialize the model.

        Args:
            config: Model cache config.
            user: Requesting user; scopes every key.
            api_client: Transport for this resource.
            store: Backing cache store.
            entity_id: Id of an existing entity, ``None`` before create.
            key_prefix: Deployment-wide key prefix. Defaults to
                ``Settings.cache_key_prefix``.
            read_through: Shared read-through cache (e.g. from a collection).
            strict_index: Treat failed index updates as errors. Defaults to
                ``Settings.cache_strict_index``.

        Raises:
            ConfigurationError: If any required setting is missing.
        """
        super().__init__(
            config,
            user=user,
            api_client=api_client,
            store=store,
            key_prefix=key_prefix,
            read_through=read_through,
            strict_index=strict_index,
        )
        self.entity_id: EntityId | None = entity_id

    @property
    def entity_key(self) -> EntityKey:
        return EntityKey.model(self.entity_id)

    def _has_id(self) -> bool:
        return self.entity_key.has_id

    def _transport_params(
        self, operation: OperationKind, params: Mapping[str, Any]
    ) -> dict[str, Any]:
        if operation is not OperationKind.CREATE and self._has_id():
            return {"id": self.entity_id, **params}
        return dict(params)

    async def fetch(
        self,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Any:
        """Read the entity, serving from cache when fresh."""
        params = build_request_params(data, headers)

        async def call(p: Mapping[str, Any]) -> Any:
            params_with_id = self._transport_params(OperationKind.READ, p)
            return await self._call_api(OperationKind.READ, params_with_id)

        if not self._has_id():
            logger.debug(
                "model has no id; reading without cache",
                extra={"entity_class": self.namespace.entity_class, "user": self.user},
            )
            try:
                return await call(params)
            except Exception as exc:
                raise FetchError("read request failed", details={"operation": "read"}) from exc

        return await self._dispatcher.handle(OperationKind.READ, self.entity_key, params, call)

    async def save(
        self,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Any:
        """Create (no id yet) or update the entity, busting its caches first.

        After a create, a mapping response carrying ``"id"`` gives the model
        its id.
        """
        operation = OperationKind.UPDATE if self._has_id() else OperationKind.CREATE
        result = await self._write(operation, build_request_params(data, headers))
        if operation is OperationKind.CREATE and isinstance(result, Mapping):
            new_id = result.get("id")
            if new_id is not None:
                self.entity_id = new_id
        return result

    async def destroy(
        self,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Any:
        """Delete the entity, busting its caches first.

        Raises:
            ConfigurationError: If the model has no id.
        """
        if not self._has_id():
            raise ConfigurationError(
                "cannot delete a model that has no id",
                details={"missing": "entity_id"},
            )
        return await self._write(OperationKind.DELETE, build_request_params(data, headers))

    async def clear_cache(self, operation: OperationKind | str = OperationKind.UPDATE) -> int:
        """Bust the caches a write of ``operation`` would bust, without writing."""
        return await self._dispatcher.clear(operation, self.entity_key)

    async def _write(self, operation: OperationKind, params: Mapping[str, Any]) -> Any:
        async def call(p: Mapping[str, Any]) -> Any:
            return await self._call_api(operation, self._transport_params(operation, p))

        return await self._dispatcher.handle(operation, self.entity_key, params, call)


class CachedCollection(_CachedResource):
    """Plural entity backed by a cached API client."""

    _expected_kind = EntityKind.COLLECTION

    def __init__(
        self,
        config: EntityCacheConfig | None = None,
        *,
        user: str | int | None,
        api_client: ApiClientPort | None,
        store: CacheStorePort | None,
        model_config: EntityCacheConfig | None = None,
        model_api_client: ApiClientPort | None = None,
        key_prefix: str | None = None,
        read_through: ReadThroughCache | None = None,
        strict_index: bool | None = None,
    ) -> None:
        """Initialize the collection.

        Args:
            config: Collection cache config. When ``None``, built from
                ``model_config``.
            user: Requesting user; scopes every key.
            api_client: Transport for collection reads.
            store: Backing cache store.
            model_config: Config of the contained model; used as fallback and
                by :meth:`prepare_model`.
            model_api_client: Transport for prepared models (defaults to
                ``api_client``).
            key_prefix: Deployment-wide key prefix. Defaults to
                ``Settings.cache_key_prefix``.
            read_through: Shared read-through cache.
            strict_index: Treat failed index updates as errors. Defaults to
                ``Settings.cache_strict_index``.

        Raises:
            ConfigurationError: If any required setting is missing.
        """
        if config is None:
            config = EntityCacheConfig.for_collection(model=model_config)
        super().__init__(
            config,
            user=user,
            api_client=api_client,
            store=store,
            key_prefix=key_prefix,
            read_through=read_through,
            strict_index=strict_index,
        )
        self._model_config = model_config
        self._model_api_client = model_api_client or api_client

    @property
    def entity_key(self) -> EntityKey:
        return EntityKey.collection()

    async def fetch(
        self,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
    ) -> Any:
        """Read the collection, serving from cache when fresh."""

        async def call(p: Mapping[str, Any]) -> Any:
            return await self._call_api(OperationKind.READ, p)

        return await self._dispatcher.handle(
            OperationKind.READ,
            self.entity_key,
            build_request_params(data, headers),
            call,
        )

    async def clear_cache(self) -> int:
        """Bust every cached read of this collection for this user."""
        return await self._dispatcher.invalidation.invalidate([self.entity_key])

    def prepare_model(
        self,
        entity_id: EntityId | None = None,
        *,
        api_client: ApiClientPort | None = None,
    ) -> CachedModel:
        """Build a model sharing this collection's user, store and cache.

        Raises:
            ConfigurationError: If the collection has no model config.
        """
        if self._model_config is None:
            raise ConfigurationError(
                "collection has no model config to prepare models from",
                details={"missing": "model_config"},
            )
        return CachedModel(
            self._model_config,
            user=self.user,
            api_client=api_client or self._model_api_client,
            store=self._store,
            entity_id=entity_id,
            key_prefix=self._key_prefix,
            read_through=self._dispatcher.read_through,
            strict_index=self._strict_index,
        )
