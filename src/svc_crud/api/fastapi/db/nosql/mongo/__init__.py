from .add import add_mongo_db, add_mongo_health, add_mongo_resources, get_mongo

__all__ = ["add_mongo_db", "add_mongo_health", "add_mongo_resources", "get_mongo"]
