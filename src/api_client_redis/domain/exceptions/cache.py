# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Cache Domain Exceptions

Purpose:
    Error kinds raised by the read-through cache, the invalidation tracker and
    the request dispatcher.

Layer: domain/exceptions

Notes:
    - ConfigurationError is fatal and never retried.
    - StoreError wraps backend failures; this layer performs no retries.
    - FetchError carries the authoritative failure as ``__cause__``.
    - InvalidationError blocks any mutation that triggered it.
"""
from __future__ import annotations

from .base import CacheLayerError


class ConfigurationError(CacheLayerError):
    """Missing or invalid cache configuration (TTL, prefix, user, store)."""

    code = "CACHE_CONFIGURATION_ERROR"


class StoreError(CacheLayerError):
    """The backing key-value store failed or returned an unusable payload."""

    code = "CACHE_STORE_ERROR"


class FetchError(CacheLayerError):
    """The underlying authoritative fetch or mutation failed."""

    code = "CACHE_FETCH_ERROR"


class InvalidationError(CacheLayerError):
    """Index enumeration or entry deletion failed; cached reads may be stale."""

    code = "CACHE_INVALIDATION_ERROR"


__all__ = [
    "CacheLayerError",
    "ConfigurationError",
    "FetchError",
    "InvalidationError",
    "StoreError",
]
