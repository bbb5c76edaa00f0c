# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Base Cache Layer Exceptions.

Summary:
    Canonical base class for cache layer errors so callers can catch one type
    and still branch on a stable ``code``.

Layer:
    domain/exceptions
"""
from __future__ import annotations

from typing import Any


class CacheLayerError(Exception):
    """Base class for all cache layer exceptions."""

    code: str = "CACHE_LAYER_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}
