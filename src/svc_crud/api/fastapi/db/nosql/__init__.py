from .mongo.add import add_mongo_db, add_mongo_health, add_mongo_resources

__all__ = [
    "add_mongo_resources",
    "add_mongo_db",
    "add_mongo_health",
]
