from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import monitoring
from pymongo.errors import PyMongoError

from svc_crud.exceptions import PersistenceError

from .settings import MongoSettings, get_mongo_settings

logger = logging.getLogger(__name__)


class ConnectionEventLogger(monitoring.ServerHeartbeatListener):
    """Heartbeat listener: logs every failed heartbeat, and the first success once."""

    def __init__(self) -> None:
        self._ready = threading.Event()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        if self._ready.is_set():
            return
        self._ready.set()
        logger.info("Connected to MongoDB (%s:%s)", *event.connection_id)

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        logger.error("MongoDB connection error (%s:%s): %s", *event.connection_id, event.reply)


class MongoConnection:
    """Holds the single motor client for the process.

    Construct it explicitly at the entry point and pass it to whatever needs the
    database (`CrudService`, migrations). ``connect()`` never raises: a bad or
    missing connection string is logged, and the first data access afterwards
    fails with ``PersistenceError``.
    """

    def __init__(self, settings: Optional[MongoSettings] = None, *, client_kwargs: Optional[dict[str, Any]] = None):
        self.settings = settings or get_mongo_settings()
        self._client_kwargs = client_kwargs or {}
        self._client: Optional[AsyncIOMotorClient] = None
        self._db_name: Optional[str] = None
        self.events = ConnectionEventLogger()

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        if self._client is not None:
            return
        try:
            url = self.settings.resolved_url
            kwargs: dict[str, Any] = {
                "serverSelectionTimeoutMS": self.settings.server_selection_timeout_ms,
                "event_listeners": [self.events],
                "tz_aware": True,
            }
            if self.settings.app_name:
                kwargs["appname"] = self.settings.app_name
            kwargs.update(self._client_kwargs)
            self._client = AsyncIOMotorClient(url, **kwargs)
            self._db_name = self.settings.resolved_db_name
        except (PyMongoError, ValueError, TypeError) as exc:
            self._client = None
            logger.error("MongoDB connection error: %s", exc)
            return
        logger.debug("MongoDB client created for database %r", self._db_name)

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._client is None:
            raise PersistenceError("MongoDB connection is not established")
        return self._client[self._db_name]

    async def ping(self) -> bool:
        try:
            await self.database.command("ping")
            return True
        except (PyMongoError, PersistenceError) as exc:
            logger.warning("MongoDB ping failed: %s", exc)
            return False

    def close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.debug("MongoDB client closed")

    async def __aenter__(self) -> "MongoConnection":
        self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
