# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for the cache layer (registry-aware, hot-reload safe).

Every collector is returned by an accessor that binds it to the **current**
``prometheus_client.REGISTRY``:

- Safe under hot reload and tests that swap the default registry.
- No duplicate-registration errors.
- Cache automatically resets when the active registry changes.

Collectors:

* ``cache_operation_duration_seconds`` / ``cache_operations_total``: raw
  store operations (``get``/``set``/``delete``/``smembers``/``sadd``).
* ``cache_lookups_total``: read-through hits and misses per entity class.
* ``cache_population_failures_total``: failed ``set``/``sadd`` after a fetch.
* ``cache_invalidations_total``: invalidation outcomes per entity class.

Example:
    get_cache_lookups_total().labels(entity_class="comment", result="hit").inc()

Recording helpers (``record_*``) never raise into the caller.
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Store round-trips are usually sub-millisecond; keep resolution at the low end.
_BUCKETS: Final[tuple[float, ...]] = (
    0.0005,
    0.001,
    0.0025,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
)

# Cache keyed by metric name within the currently-active registry.
_registry_id: int | None = None
_hist_cache: dict[str, Histogram] = {}
_counter_cache: dict[str, Counter] = {}
_lock = threading.RLock()


# ---------------------------------------------------------------------------
# Registry-handling primitives


def _ensure_registry() -> None:
    """Reset caches if the active registry changed.

    This must be called before any metric lookup/creation to avoid mixing
    collectors across registries (common in tests).
    """
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _hist_cache.clear()
            _counter_cache.clear()
            _registry_id = rid


def _lookup_existing_hist(name: str) -> Histogram | None:
    """Return a previously-registered ``Histogram`` from the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, Histogram):
                return col
    return None


def _lookup_existing_counter(name: str) -> Counter | None:
    """Return a previously-registered ``Counter`` from the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, Counter):
                return col
    return None


# ---------------------------------------------------------------------------
# Get-or-create helpers


def _get_or_create_hist(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Histogram:
    """Get or create a registry-bound ``Histogram`` with stable identity.

    1. Return from module cache if present for the active registry.
    2. If registry already has a collector by this name, reuse it.
    3. Otherwise, register a new collector on the active registry.
    4. If concurrent registration triggers a duplication error, retry step 2.
    """
    _ensure_registry()
    with _lock:
        cached = _hist_cache.get(name)
        if cached is not None:
            return cached

        existing = _lookup_existing_hist(name)
        if existing is not None:
            _hist_cache[name] = existing
            return existing

        try:
            h = Histogram(name, help_text, labelnames, buckets=_BUCKETS, registry=prom.REGISTRY)
        except ValueError as exc:
            again = _lookup_existing_hist(name)
            if "Duplicated timeseries" in str(exc) and again is not None:
                _hist_cache[name] = again
                return again
            _log.exception("Failed to register Prometheus histogram %s", name)
            raise
        _hist_cache[name] = h
        return h


def _get_or_create_counter(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    """Get or create a registry-bound ``Counter`` with stable identity."""
    _ensure_registry()
    with _lock:
        cached = _counter_cache.get(name)
        if cached is not None:
            return cached

        existing = _lookup_existing_counter(name)
        if existing is not None:
            _counter_cache[name] = existing
            return existing

        try:
            c = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            again = _lookup_existing_counter(name)
            if "Duplicated timeseries" in str(exc) and again is not None:
                _counter_cache[name] = again
                return again
            _log.exception("Failed to register Prometheus counter %s", name)
            raise
        _counter_cache[name] = c
        return c


# ---------------------------------------------------------------------------
# Store operation metrics


def get_cache_operation_duration_seconds() -> Histogram:
    """Return histogram for store operation latency.

    Labels:
        operation: Store operation name (e.g. ``get`` / ``sadd``).
        namespace: Store label (deployment key prefix).
        hit: ``true``/``false``/``n/a``.
    """
    return _get_or_create_hist(
        name="cache_operation_duration_seconds",
        help_text="Latency (seconds) of cache store operations.",
        labelnames=("operation", "namespace", "hit"),
    )


def get_cache_operations_total() -> Counter:
    """Return counter for store operations (same labels as the histogram)."""
    return _get_or_create_counter(
        name="cache_operations_total",
        help_text="Total cache store operations by type/namespace.",
        labelnames=("operation", "namespace", "hit"),
    )


# ---------------------------------------------------------------------------
# Read-through / invalidation metrics


def get_cache_lookups_total() -> Counter:
    """Return counter of read-through lookups (``result``: ``hit``/``miss``)."""
    return _get_or_create_counter(
        name="cache_lookups_total",
        help_text="Read-through cache lookups by entity class and result.",
        labelnames=("entity_class", "result"),
    )


def get_cache_population_failures_total() -> Counter:
    """Return counter of failed cache writes after a successful fetch."""
    return _get_or_create_counter(
        name="cache_population_failures_total",
        help_text="Failed cache population steps (set/sadd) after a successful fetch.",
        labelnames=("entity_class", "step"),
    )


def get_cache_invalidations_total() -> Counter:
    """Return counter of invalidation outcomes (``result``: ``ok``/``error``)."""
    return _get_or_create_counter(
        name="cache_invalidations_total",
        help_text="Cache invalidations by entity class and outcome.",
        labelnames=("entity_class", "result"),
    )


def record_lookup(entity_class: str, *, hit: bool) -> None:
    with suppress(Exception):
        get_cache_lookups_total().labels(
            entity_class=entity_class, result="hit" if hit else "miss"
        ).inc()


def record_population_failure(entity_class: str, step: str) -> None:
    with suppress(Exception):
        get_cache_population_failures_total().labels(entity_class=entity_class, step=step).inc()


def record_invalidation(entity_class: str, *, ok: bool) -> None:
    with suppress(Exception):
        get_cache_invalidations_total().labels(
            entity_class=entity_class, result="ok" if ok else "error"
        ).inc()


__all__ = [
    "get_cache_invalidations_total",
    "get_cache_lookups_total",
    "get_cache_operation_duration_seconds",
    "get_cache_operations_total",
    "get_cache_population_failures_total",
    "record_invalidation",
    "record_lookup",
    "record_population_failure",
]
