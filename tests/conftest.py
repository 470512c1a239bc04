"""
Root conftest.py for svc-crud tests.

This file provides:
1. An in-memory stand-in for the motor collection/database API
2. A fake MongoConnection sharing that database
3. A controllable clock for createdAt/deletedAt stamps

Only the subset of the driver API the repository and migrations use is
implemented: insert_one, find_one, find().sort().to_list(),
find_one_and_update($set), list_collection_names, create_collection,
drop_collection and the ping command.
"""

from __future__ import annotations

import copy
import datetime as dt
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import CollectionInvalid


# =============================================================================
# IN-MEMORY MONGO
# =============================================================================


def _matches(doc: Dict[str, Any], filt: Dict[str, Any]) -> bool:
    for key, cond in filt.items():
        value = doc.get(key)
        if isinstance(cond, dict) and "$ne" in cond:
            if value == cond["$ne"]:
                return False
        elif value != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, keys):
        for field, direction in reversed(list(keys)):
            self._docs.sort(key=lambda d: d.get(field), reverse=direction < 0)
        return self

    async def to_list(self, length=None):
        return self._docs if length is None else self._docs[:length]


class FakeCollection:
    """Mock MongoDB collection keeping documents in a list."""

    def __init__(self, name: str):
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def insert_one(self, doc: Dict[str, Any]):
        self._check()
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, filt: Dict[str, Any]):
        self._check()
        for doc in self.docs:
            if _matches(doc, filt):
                return copy.deepcopy(doc)
        return None

    def find(self, filt: Dict[str, Any]):
        self._check()
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, filt)])

    async def find_one_and_update(self, filt, update, return_document=ReturnDocument.BEFORE):
        self._check()
        for doc in self.docs:
            if _matches(doc, filt):
                before = copy.deepcopy(doc)
                doc.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before
        return None


class FakeDatabase:
    def __init__(self, name: str = "test_db"):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}
        self.ping_ok = True

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def list_collection_names(self, filter=None):
        names = list(self.collections)
        if filter and "name" in filter:
            names = [n for n in names if n == filter["name"]]
        return names

    async def create_collection(self, name: str):
        if name in self.collections:
            raise CollectionInvalid(f"collection {name} already exists")
        self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def drop_collection(self, name: str):
        self.collections.pop(name, None)

    async def command(self, cmd: str):
        if not self.ping_ok:
            from pymongo.errors import ServerSelectionTimeoutError

            raise ServerSelectionTimeoutError("no servers available")
        return {"ok": 1}


class FakeConnection:
    """Duck-typed MongoConnection over a FakeDatabase."""

    def __init__(self, database: Optional[FakeDatabase] = None, settings=None):
        self.database = database or FakeDatabase()
        self.settings = settings or SimpleNamespace(db=self.database.name)
        self.events = SimpleNamespace(ready=True)
        self.connected = False
        self.connect_calls = 0
        self.close_calls = 0

    @property
    def is_connected(self) -> bool:
        return self.connected

    def connect(self) -> None:
        self.connect_calls += 1
        self.connected = True

    def close(self) -> None:
        self.close_calls += 1
        self.connected = False

    async def ping(self) -> bool:
        try:
            await self.database.command("ping")
            return True
        except Exception:
            return False

    async def __aenter__(self):
        self.connect()
        return self

    async def __aexit__(self, *exc_info):
        self.close()


class StepClock:
    """Deterministic UTC clock: every call advances one second."""

    def __init__(self, start: Optional[dt.datetime] = None):
        self.now = start or dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)

    def __call__(self) -> dt.datetime:
        self.now = self.now + dt.timedelta(seconds=1)
        return self.now


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def fake_connection(fake_db) -> FakeConnection:
    return FakeConnection(fake_db)


@pytest.fixture
def clock(monkeypatch) -> StepClock:
    c = StepClock()
    monkeypatch.setattr("svc_crud.db.nosql.repository._utcnow", c)
    return c


@pytest.fixture(autouse=True)
def _mongo_env(monkeypatch):
    """Keep tests independent of the developer's shell."""
    for name in ("MONGO_URL", "MONGO_DB", "MONGODB_CONNECTION_STRING_ONLINE", "MONGODB_URI"):
        monkeypatch.delenv(name, raising=False)
    from svc_crud.db.nosql.mongo.settings import get_mongo_settings

    get_mongo_settings.cache_clear()
    yield
    get_mongo_settings.cache_clear()


@pytest.fixture
def connection_factory(fake_db):
    """Callable standing in for the MongoConnection class; records every connection it opens."""
    opened: List[FakeConnection] = []

    def _factory(settings=None):
        conn = FakeConnection(fake_db, settings=settings)
        opened.append(conn)
        return conn

    _factory.opened = opened  # type: ignore[attr-defined]
    return _factory
