# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Base Entity (Domain Layer).

Purpose:
    Mixin for immutable cache value objects. Provides frozen dataclass
    semantics and a shared guard for required text fields.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from api_client_redis.domain.exceptions.cache import ConfigurationError


@dataclass(frozen=True, slots=True)
class BaseEntity:
    """Base mixin for cache value objects.

    Concrete entities declare their own fields and enforce invariants in
    ``__post_init__``; :meth:`_require` is the shared check for fields that
    scope cache keys and therefore must never be empty.
    """

    @staticmethod
    def _require(value: Any, field_name: str, hint: str = "") -> str:
        """Return ``value`` as text or raise if it is missing.

        Args:
            value: Raw field value.
            field_name: Name used in the error message and details.
            hint: Optional remediation appended to the message.

        Returns:
            str: The value rendered as a string.

        Raises:
            ConfigurationError: If the value is ``None`` or renders empty.
        """
        text = "" if value is None else str(value).strip()
        if not text:
            message = f"`{field_name}` is required to scope cache keys but was not provided"
            if hint:
                message = f"{message}. {hint}"
            raise ConfigurationError(message, details={"missing": field_name})
        return text
