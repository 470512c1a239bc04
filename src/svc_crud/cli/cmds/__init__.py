from .mongo_cmds import register as register_mongo
from .scaffold_cmds import register as register_scaffold

__all__ = [
    "register_mongo",
    "register_scaffold",
]
