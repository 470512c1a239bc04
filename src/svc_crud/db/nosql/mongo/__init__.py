from .client import MongoConnection
from .settings import MongoSettings, get_mongo_settings

__all__ = ["MongoConnection", "MongoSettings", "get_mongo_settings"]
