# src/api_client_redis/application/interfaces/api_client_port.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Application Interface: API Client Port.

Synopsis:
    Transport boundary for the remote API that the cache sits in front of.
    Authentication, HTTP and resource routing are the implementation's
    concern; this layer only forwards an operation kind and its parameters.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from api_client_redis.domain.enums.cache import OperationKind


class ApiClientPort(Protocol):
    """Remote API client for one resource type."""

    async def call(self, operation: OperationKind, params: Mapping[str, Any]) -> Any:
        """Perform ``operation`` against the remote API.

        Args:
            operation: Read, create, update or delete.
            params: Request parameters (query data, ``headers`` and, for
                non-create calls on a model, its ``id``).

        Returns:
            The JSON-serializable response payload.
        """
