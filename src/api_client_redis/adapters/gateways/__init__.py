# src/api_client_redis/adapters/gateways/__init__.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Cached API resources (Adapters Layer)

Purpose:
    Wrap an API client for one resource type so its reads are served from
    the per-user Redis cache and its writes bust that cache first.

Exports:
    - CachedModel: single entity (fetch/save/destroy).
    - CachedCollection: plural entity (fetch, prepare_model).
"""

from __future__ import annotations

from .cached_resource import CachedCollection, CachedModel

__all__ = ["CachedCollection", "CachedModel"]
