# src/api_client_redis/domain/enums/cache.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Cache enumerations.

Purpose:
    Stable tokens for the kind of entity being cached and the kind of request
    being dispatched. Values appear verbatim in cache keys and metric labels,
    so they must never change.

Layer:
    domain
"""

from __future__ import annotations

from enum import Enum


class EntityKind(str, Enum):
    """Singular (model) or plural (collection) entity."""

    MODEL = "model"
    COLLECTION = "collection"


class OperationKind(str, Enum):
    """Request kinds understood by the dispatcher."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_mutation(self) -> bool:
        return self is not OperationKind.READ
