# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Request fingerprinting.

Turns a request's parameters (query data plus headers) into a fixed-width
SHA-256 hex digest. Canonicalization sorts mapping keys at every depth and
normalizes sequence/set containers, so two requests with the same content
always hash the same regardless of insertion order or process.

Plain JSON (string keys, ``None``/bool/int/float/str scalars) is hashed as
is. Anything else is rewritten to an object tagged with ``"__type__"``:
mappings with non-string keys become sorted ``[key, value]`` pairs, other
scalars carry their qualified type name and their text (hex for bytes). A
mapping that itself uses the ``"__type__"`` key is always wrapped, so a
tagged form can never be spelled by plain input.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Set
from typing import Any

__all__ = ["FINGERPRINT_LENGTH", "build_request_params", "canonicalize", "fingerprint"]

#: Hex characters in a fingerprint (256-bit digest).
FINGERPRINT_LENGTH = 64

_TYPE_TAG = "__type__"


def canonicalize(value: Any) -> Any:
    """Return a JSON-ready structure with order-independent containers."""
    if isinstance(value, Mapping):
        return _canonical_mapping(value)
    if isinstance(value, (list, tuple)):
        return [canonicalize(v) for v in value]
    if isinstance(value, Set):
        items = [canonicalize(v) for v in value]
        return sorted(items, key=_sort_token)
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    text = value.hex() if isinstance(value, (bytes, bytearray)) else str(value)
    return {_TYPE_TAG: _qualified_name(value), "value": text}


def _canonical_mapping(value: Mapping[Any, Any]) -> dict[str, Any]:
    if all(isinstance(k, str) for k in value) and _TYPE_TAG not in value:
        return {k: canonicalize(v) for k, v in value.items()}
    pairs = [[canonicalize(k), canonicalize(v)] for k, v in value.items()]
    return {_TYPE_TAG: "mapping", "items": sorted(pairs, key=_sort_token)}


def _qualified_name(value: Any) -> str:
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}"


def _sort_token(item: Any) -> str:
    # Mixed-type sets have no natural order; their JSON text does.
    return json.dumps(item, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def fingerprint(request_params: Mapping[str, Any] | None) -> str:
    """Hash request parameters into a stable fingerprint.

    Args:
        request_params: Request data and headers. ``None`` is treated as an
            empty mapping.

    Returns:
        str: 64 lowercase hex characters.
    """
    canonical = canonicalize(request_params or {})
    data = json.dumps(
        canonical,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def build_request_params(
    data: Mapping[str, Any] | None = None,
    headers: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge query data and headers into one request-parameter mapping.

    Headers are nested under ``"headers"`` and only when present, so a
    header-less request fingerprints the same as its bare data.
    """
    params: dict[str, Any] = dict(data or {})
    if headers:
        params["headers"] = dict(headers)
    return params
