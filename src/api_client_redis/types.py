# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Project-wide typing helpers.

Callable aliases for the fetch and mutation callbacks supplied by API client
wrappers.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

RequestParams: TypeAlias = Mapping[str, Any]
Loader: TypeAlias = Callable[[], Awaitable[Any]]
RequestCallback: TypeAlias = Callable[[RequestParams], Awaitable[Any]]

__all__ = ["Loader", "RequestCallback", "RequestParams"]
