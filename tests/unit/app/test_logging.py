from __future__ import annotations

import json
import logging
import sys

import pytest

from svc_crud.app.core.logging import JsonFormatter, setup_logging


def _record(msg="hello", *, exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="svc_crud.db.nosql.service",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_basic_fields():
    payload = json.loads(JsonFormatter().format(_record()))

    assert payload["level"] == "ERROR"
    assert payload["logger"] == "svc_crud.db.nosql.service"
    assert payload["message"] == "hello"
    assert "crud" not in payload and "http" not in payload and "error" not in payload


def test_json_formatter_includes_crud_context():
    record = _record(collection="homeslider", operation="destroy", record_id="64f1c0ffee")

    payload = json.loads(JsonFormatter().format(record))

    assert payload["crud"] == {"collection": "homeslider", "operation": "destroy", "record_id": "64f1c0ffee"}


def test_json_formatter_includes_http_context():
    record = _record(http_method="GET", path="/homeslider/x", status_code=500)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["http"] == {"method": "GET", "path": "/homeslider/x", "status": 500}


def test_json_formatter_truncates_stack(monkeypatch):
    monkeypatch.setenv("LOG_STACK_LIMIT", "20")
    try:
        raise RuntimeError("store unreachable")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    err = json.loads(JsonFormatter().format(record))["error"]

    assert err["type"] == "RuntimeError"
    assert err["message"] == "store unreachable"
    assert err["stack"].endswith("...(truncated)")


def test_setup_logging_explicit_level_and_json(restore_root_logger):
    setup_logging(level="warning", fmt="json")

    root = restore_root_logger
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert logging.getLogger("pymongo").level == logging.WARNING


def test_setup_logging_reads_env(monkeypatch, restore_root_logger):
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_FORMAT", "plain")

    setup_logging()

    root = restore_root_logger
    assert root.level == logging.ERROR
    assert not isinstance(root.handlers[0].formatter, JsonFormatter)
