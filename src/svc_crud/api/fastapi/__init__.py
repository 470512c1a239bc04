from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import FastAPI

from svc_crud.app import CURRENT_ENVIRONMENT, setup_logging
from svc_crud.app.settings import AppSettings, get_app_settings
from svc_crud.db.nosql.mongo.client import MongoConnection
from svc_crud.db.nosql.resource import NoSqlResource

from .crud_router import make_crud_router
from .db.nosql import add_mongo_db, add_mongo_health, add_mongo_resources
from .middleware.errors.catchall import CatchAllExceptionMiddleware
from .middleware.errors.error_handlers import register_error_handlers

logger = logging.getLogger(__name__)


def setup_service_api(
    resources: Iterable[NoSqlResource],
    *,
    connection: Optional[MongoConnection] = None,
    mongo_url: Optional[str] = None,
    app_settings: Optional[AppSettings] = None,
    configure_logging: bool = True,
    health_path: Optional[str] = "/_mongo/health",
) -> FastAPI:
    """
    Build a FastAPI app serving CRUD routes for every resource.

    The Mongo connection is created here (or passed in), connected in the app
    lifespan and closed on shutdown; every resource's controller shares it.
    """
    if configure_logging:
        setup_logging()

    settings = app_settings or get_app_settings()
    app = FastAPI(title=settings.name, version=settings.version)

    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    conn = add_mongo_db(app, connection=connection, url=mongo_url)
    if health_path:
        add_mongo_health(app, path=health_path)
    add_mongo_resources(app, resources, connection=conn)

    logger.info(f"{settings.version} version of {settings.name} initialized [env: {CURRENT_ENVIRONMENT}]")
    return app


__all__ = [
    "setup_service_api",
    "make_crud_router",
    "add_mongo_db",
    "add_mongo_health",
    "add_mongo_resources",
    "register_error_handlers",
    "CatchAllExceptionMiddleware",
]
