# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Cache Layer Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the Redis connection and the
    deployment-wide cache settings. Per entity-type settings (entity class,
    TTL) are not environment-driven; they are passed explicitly as
    :class:`~api_client_redis.domain.entities.entity_cache_config.EntityCacheConfig`.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Explicit field declarations with constrained types and ranges.
    - Singleton accessor `get_settings()` with LRU cache.
    - Safe, structured logging (no secrets).
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Final

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

#: Key prefix used when none is configured. Changing it orphans existing entries.
DEFAULT_CACHE_KEY_PREFIX: Final[str] = "api-client"

#: Redis URL used when `REDIS_URL` is unset.
DEFAULT_REDIS_URL: Final[str] = "redis://localhost:6379/0"


class Settings(BaseSettings):
    """Typed configuration for the cache layer."""

    # ---------------------------
    # Redis connection
    # ---------------------------
    redis_url: str = Field(
        default=DEFAULT_REDIS_URL,
        description="Redis connection URL for the cache store.",
        validation_alias="REDIS_URL",
    )
    redis_health_check_interval_s: int = Field(
        default=15,
        ge=1,
        le=3600,
        description="Health check interval for Redis clients in seconds.",
        validation_alias="REDIS_HEALTH_CHECK_INTERVAL_S",
    )
    redis_socket_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket timeout in seconds for Redis commands.",
        validation_alias="REDIS_SOCKET_TIMEOUT_S",
    )
    redis_socket_connect_timeout_s: float = Field(
        default=3.0,
        ge=0.1,
        le=60.0,
        description="Socket connect timeout in seconds for Redis.",
        validation_alias="REDIS_SOCKET_CONNECT_TIMEOUT_S",
    )

    # ---------------------------
    # Cache behavior
    # ---------------------------
    cache_key_prefix: str = Field(
        default=DEFAULT_CACHE_KEY_PREFIX,
        min_length=1,
        description="Fixed prefix for every cache and index key.",
        validation_alias="CACHE_KEY_PREFIX",
    )
    cache_strict_index: bool = Field(
        default=False,
        description=(
            "Fail reads whose index update fails instead of logging. Such entries "
            "cannot be invalidated before their TTL expires."
        ),
        validation_alias="CACHE_STRICT_INDEX",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level.",
        validation_alias="LOG_LEVEL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @field_validator("cache_key_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        value = value.strip()
        if not value or ":" in value:
            raise ValueError("CACHE_KEY_PREFIX must be non-empty and must not contain ':'")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown LOG_LEVEL {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
        logger.info(
            "Settings initialized",
            extra={
                "redis_url_set": bool(settings.redis_url),
                "cache_key_prefix": settings.cache_key_prefix,
                "cache_strict_index": settings.cache_strict_index,
                "redis_socket_timeout_s": settings.redis_socket_timeout_s,
            },
        )
        return settings
    except ValidationError as exc:
        logger.exception("Invalid cache configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
