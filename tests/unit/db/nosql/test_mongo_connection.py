from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from svc_crud.db.nosql.mongo.client import ConnectionEventLogger, MongoConnection
from svc_crud.db.nosql.mongo.settings import MongoSettings, get_mongo_settings
from svc_crud.exceptions import PersistenceError


# ---------- settings ----------

def test_settings_read_mongo_url(monkeypatch):
    monkeypatch.setenv("MONGO_URL", "mongodb://db.internal:27017/shop")

    s = get_mongo_settings()

    assert s.resolved_url == "mongodb://db.internal:27017/shop"
    assert s.resolved_db_name == "shop"


def test_settings_fall_back_to_legacy_connection_string(monkeypatch):
    monkeypatch.setenv("MONGODB_CONNECTION_STRING_ONLINE", "mongodb+srv://u:p@cluster0.example.net/cms?retryWrites=true")

    s = MongoSettings()

    assert s.resolved_url.startswith("mongodb+srv://")
    assert s.resolved_db_name == "cms"


def test_settings_explicit_db_wins(monkeypatch):
    monkeypatch.setenv("MONGO_DB", "analytics")

    s = MongoSettings(url="mongodb://localhost:27017/ignored")

    assert s.resolved_db_name == "analytics"


def test_settings_default_db_name_when_url_has_no_path():
    assert MongoSettings(url="mongodb://localhost:27017").resolved_db_name == "app"


def test_settings_missing_url_raises():
    with pytest.raises(ValueError, match="MONGO_URL"):
        MongoSettings().resolved_url


def test_get_mongo_settings_ignores_none_overrides(monkeypatch):
    monkeypatch.setenv("MONGO_URL", "mongodb://from-env:27017")

    assert get_mongo_settings(url=None).url == "mongodb://from-env:27017"
    assert get_mongo_settings(url="mongodb://override:27017").url == "mongodb://override:27017"


# ---------- connection ----------

def test_connect_without_url_logs_and_does_not_raise(caplog):
    conn = MongoConnection(MongoSettings())

    with caplog.at_level(logging.ERROR, logger="svc_crud.db.nosql.mongo.client"):
        conn.connect()

    assert not conn.is_connected
    assert "MongoDB connection error" in caplog.text
    with pytest.raises(PersistenceError, match="not established"):
        conn.database


@pytest.mark.parametrize("url", ["mongodb://", "mongodb+srv://a"])
def test_connect_with_invalid_uri_logs_and_does_not_raise(caplog, url):
    conn = MongoConnection(MongoSettings(url=url))

    with caplog.at_level(logging.ERROR, logger="svc_crud.db.nosql.mongo.client"):
        conn.connect()

    assert not conn.is_connected
    assert "MongoDB connection error" in caplog.text


@pytest.mark.asyncio
async def test_connect_creates_single_client_and_close_disposes():
    conn = MongoConnection(
        MongoSettings(url="mongodb://127.0.0.1:27017/testdb", server_selection_timeout_ms=50)
    )

    conn.connect()
    client = conn.client
    conn.connect()  # second call is a no-op

    try:
        assert conn.is_connected
        assert conn.client is client
        assert conn.database.name == "testdb"
    finally:
        conn.close()

    assert not conn.is_connected
    conn.close()  # closing twice is harmless


@pytest.mark.asyncio
async def test_ping_false_when_not_connected():
    assert await MongoConnection(MongoSettings()).ping() is False


@pytest.mark.asyncio
async def test_async_context_manager_connects_and_closes(monkeypatch):
    calls = []
    conn = MongoConnection(MongoSettings())
    monkeypatch.setattr(conn, "connect", lambda: calls.append("connect"))
    monkeypatch.setattr(conn, "close", lambda: calls.append("close"))

    async with conn as entered:
        assert entered is conn

    assert calls == ["connect", "close"]


# ---------- event listener ----------

def _event(reply=None):
    return SimpleNamespace(connection_id=("db.internal", 27017), reply=reply)


def test_listener_logs_ready_once(caplog):
    listener = ConnectionEventLogger()

    with caplog.at_level(logging.INFO, logger="svc_crud.db.nosql.mongo.client"):
        listener.succeeded(_event())
        listener.succeeded(_event())
        listener.succeeded(_event())

    assert listener.ready
    assert caplog.text.count("Connected to MongoDB") == 1


def test_listener_logs_every_failure(caplog):
    listener = ConnectionEventLogger()

    with caplog.at_level(logging.ERROR, logger="svc_crud.db.nosql.mongo.client"):
        listener.failed(_event(ConnectionRefusedError("refused")))
        listener.succeeded(_event())
        listener.failed(_event(TimeoutError("timed out")))

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 2
    assert "refused" in errors[0].getMessage()
    assert "timed out" in errors[1].getMessage()
