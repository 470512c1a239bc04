from __future__ import annotations

from .mongo.client import MongoConnection
from .mongo.settings import MongoSettings, get_mongo_settings
from .record import Record
from .repository import NoSqlRepository
from .resource import NoSqlResource
from .service import CrudService

__all__ = [
    "CrudService",
    "MongoConnection",
    "MongoSettings",
    "get_mongo_settings",
    "NoSqlRepository",
    "NoSqlResource",
    "Record",
]
