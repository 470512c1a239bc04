from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from svc_crud.api.fastapi.crud_router import make_crud_router
from svc_crud.db.nosql.mongo.client import MongoConnection
from svc_crud.db.nosql.mongo.settings import get_mongo_settings
from svc_crud.db.nosql.resource import NoSqlResource
from svc_crud.db.nosql.service import CrudService

logger = logging.getLogger(__name__)


def add_mongo_db(
    app: FastAPI,
    *,
    connection: Optional[MongoConnection] = None,
    url: Optional[str] = None,
) -> MongoConnection:
    """Attach one MongoConnection to the app; connect on startup, close on shutdown."""
    if connection is None:
        connection = MongoConnection(get_mongo_settings(url=url))

    existing = getattr(app.router, "lifespan_context", None)  # type: ignore[attr-defined]

    @asynccontextmanager
    async def composed_lifespan(_app: FastAPI):
        connection.connect()
        _app.state.mongo = connection  # type: ignore[attr-defined]
        try:
            if existing:
                async with existing(_app):  # type: ignore[misc]
                    yield
            else:
                yield
        finally:
            connection.close()

    app.router.lifespan_context = composed_lifespan  # type: ignore[attr-defined]
    app.state.mongo = connection  # type: ignore[attr-defined]
    return connection


def get_mongo(request: Request) -> MongoConnection:
    return request.app.state.mongo  # type: ignore[attr-defined]


def add_mongo_resources(
    app: FastAPI,
    resources: Iterable[NoSqlResource],
    *,
    connection: Optional[MongoConnection] = None,
) -> dict[str, CrudService]:
    """Mount one CRUD router per resource. Returns the services keyed by collection."""
    connection = connection or app.state.mongo  # type: ignore[attr-defined]
    services: dict[str, CrudService] = {}
    for resource in resources:
        service = CrudService(resource, connection)
        app.include_router(make_crud_router(service))
        services[resource.collection] = service
        logger.debug("Mounted CRUD routes for %r at %s", resource.collection, resource.prefix)
    return services


def add_mongo_health(app: FastAPI, *, path: str = "/_mongo/health") -> None:
    router = APIRouter(tags=["internal"])

    @router.get(path, include_in_schema=False)
    async def mongo_health(request: Request, verbose: int = 0):
        conn = get_mongo(request)
        ok = await conn.ping()
        if not verbose:
            return JSONResponse(status_code=200 if ok else 503, content={"ok": ok})
        info = {
            "ok": ok,
            "connected": conn.is_connected,
            "ready": conn.events.ready,
            "database": conn.settings.db,
        }
        return JSONResponse(status_code=200 if ok else 503, content=info)

    app.include_router(router)
