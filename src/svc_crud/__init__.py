from . import api, app

from .exceptions import NotFound, PersistenceError, SvcCrudError, ValidationError
from .db.nosql import (
    CrudService,
    MongoConnection,
    MongoSettings,
    NoSqlRepository,
    NoSqlResource,
    Record,
)

__all__ = [
    # Modules
    "app",
    "api",
    # Errors
    "SvcCrudError",
    "ValidationError",
    "NotFound",
    "PersistenceError",
    # Document store
    "CrudService",
    "MongoConnection",
    "MongoSettings",
    "NoSqlRepository",
    "NoSqlResource",
    "Record",
]
