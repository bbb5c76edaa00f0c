# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Config package export.

Keeps import sites clean and stable:
    from api_client_redis.config import get_settings, Settings
"""

from __future__ import annotations

from .settings import DEFAULT_CACHE_KEY_PREFIX, DEFAULT_REDIS_URL, Settings, get_settings

__all__ = ["DEFAULT_CACHE_KEY_PREFIX", "DEFAULT_REDIS_URL", "Settings", "get_settings"]
