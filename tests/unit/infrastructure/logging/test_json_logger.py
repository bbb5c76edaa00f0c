# tests/unit/infrastructure/logging/test_json_logger.py
from __future__ import annotations

import json
import logging
import sys

import pytest

from api_client_redis.domain.enums.cache import OperationKind
from api_client_redis.infrastructure.logging.logger import (
    _JsonFormatter,
    configure_root_logging,
    get_json_logger,
)


def _record(msg: str = "cache hit", **attrs) -> logging.LogRecord:
    record = logging.LogRecord("api_client_redis.test", logging.DEBUG, __file__, 1, msg, (), None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_stable_keys_and_context() -> None:
    record = _record(
        cache_key="ns:u1-comment-model-1-fp",
        entity_class="comment",
        operation=OperationKind.UPDATE,
    )
    line = _JsonFormatter().format(record)
    payload = json.loads(line)

    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "api_client_redis.test"
    assert payload["message"] == "cache hit"
    assert payload["cache_key"] == "ns:u1-comment-model-1-fp"
    assert payload["entity_class"] == "comment"
    assert payload["operation"] == "update"
    assert "ts" in payload
    assert "index_key" not in payload


def test_formatter_includes_exception_and_extra_dict() -> None:
    try:
        raise ValueError("bad payload")
    except ValueError:
        record = logging.LogRecord(
            "x", logging.WARNING, __file__, 1, "failed", (), exc_info=sys.exc_info()
        )
    record.extra = {"attempt": 2}

    payload = json.loads(_JsonFormatter().format(record))

    assert payload["exc_type"] == "ValueError"
    assert payload["exc_message"] == "bad payload"
    assert payload["attempt"] == 2


def test_configure_root_logging_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setenv("LOG_LEVEL", "warning")

    configure_root_logging()
    configure_root_logging()

    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, _JsonFormatter)
    assert root.level == logging.WARNING

    configure_root_logging("debug")
    assert root.level == logging.DEBUG


def test_get_json_logger_propagates() -> None:
    log = get_json_logger("api_client_redis.some.module")
    assert log.name == "api_client_redis.some.module"
    assert log.propagate is True
