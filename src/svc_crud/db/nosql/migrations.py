"""Collection migrations.

A migration script is a Python file in a migrations directory, named
``<epoch-millis>_<collection>.py``. It exposes either a module-level
``migration`` (a :class:`CollectionMigration`) or two coroutine functions
``up()`` and ``down()``. Scripts run in file-name order on ``up`` and in
reverse order on ``down``.

There is no applied-migrations ledger: the only state is whether the
collection exists.
"""

from __future__ import annotations

import importlib.util
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from pymongo.errors import CollectionInvalid, PyMongoError

from svc_crud.exceptions import PersistenceError

from .mongo.client import MongoConnection
from .mongo.settings import MongoSettings, get_mongo_settings

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = "migrations"

MIGRATION_TEMPLATE = '''\
from svc_crud.db.nosql.migrations import CollectionMigration

migration = CollectionMigration("{collection}")
'''


class CollectionMigration:
    """Creates or drops one collection. Every call opens its own connection."""

    def __init__(self, collection: str, *, settings: Optional[MongoSettings] = None):
        self.collection = collection
        self._settings = settings

    @property
    def settings(self) -> MongoSettings:
        # resolved lazily so CLI overrides applied after import still count
        return self._settings or get_mongo_settings()

    def _connection(self) -> MongoConnection:
        return MongoConnection(self.settings)

    async def exists(self) -> bool:
        async with self._connection() as conn:
            try:
                names = await conn.database.list_collection_names(filter={"name": self.collection})
            except PyMongoError as exc:
                raise PersistenceError(str(exc)) from exc
        return self.collection in names

    async def up(self) -> bool:
        """Create the collection if absent. Returns True when it was created."""
        async with self._connection() as conn:
            db = conn.database
            try:
                names = await db.list_collection_names(filter={"name": self.collection})
                if self.collection in names:
                    logger.info("Collection %r already exists", self.collection)
                    return False
                await db.create_collection(self.collection)
            except CollectionInvalid:
                # created concurrently between the check and the create
                return False
            except PyMongoError as exc:
                raise PersistenceError(str(exc)) from exc
        logger.info("Created collection %r", self.collection)
        return True

    async def down(self) -> None:
        """Drop the collection and every record in it."""
        async with self._connection() as conn:
            try:
                await conn.database.drop_collection(self.collection)
            except PyMongoError as exc:
                raise PersistenceError(str(exc)) from exc
        logger.info("Dropped collection %r", self.collection)


@dataclass
class MigrationScript:
    name: str
    path: Path
    up: Callable[[], Awaitable[object]]
    down: Callable[[], Awaitable[object]]
    migration: Optional[CollectionMigration] = None

    @property
    def collection(self) -> Optional[str]:
        return self.migration.collection if self.migration is not None else None

    def matches(self, key: str) -> bool:
        return key in (self.name, self.collection)


def load_migration(path: Path) -> MigrationScript:
    path = Path(path)
    spec = importlib.util.spec_from_file_location(f"_svc_crud_migration_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot load migration {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    migration = getattr(module, "migration", None)
    if isinstance(migration, CollectionMigration):
        return MigrationScript(
            name=path.stem,
            path=path,
            up=migration.up,
            down=migration.down,
            migration=migration,
        )

    up = getattr(module, "up", None)
    down = getattr(module, "down", None)
    if callable(up) and callable(down):
        return MigrationScript(name=path.stem, path=path, up=up, down=down)

    raise ValueError(
        f"Migration {path.name} must define `migration = CollectionMigration(...)` "
        "or async `up()` and `down()` functions"
    )


def discover_migrations(directory: Path | str = DEFAULT_MIGRATIONS_DIR) -> list[MigrationScript]:
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Migrations directory not found: {directory}")
    paths = sorted(p for p in directory.glob("*.py") if not p.name.startswith("_"))
    return [load_migration(p) for p in paths]


def _select(scripts: list[MigrationScript], only: Optional[str]) -> list[MigrationScript]:
    if only is None:
        return scripts
    selected = [s for s in scripts if s.matches(only)]
    if not selected:
        raise LookupError(f"No migration named {only!r}")
    return selected


async def run_up(directory: Path | str = DEFAULT_MIGRATIONS_DIR, *, only: Optional[str] = None) -> list[str]:
    applied: list[str] = []
    for script in _select(discover_migrations(directory), only):
        logger.info("Migrating up: %s", script.name)
        await script.up()
        applied.append(script.name)
    return applied


async def run_down(directory: Path | str = DEFAULT_MIGRATIONS_DIR, *, only: Optional[str] = None) -> list[str]:
    reverted: list[str] = []
    for script in reversed(_select(discover_migrations(directory), only)):
        logger.info("Migrating down: %s", script.name)
        await script.down()
        reverted.append(script.name)
    return reverted


async def migration_status(directory: Path | str = DEFAULT_MIGRATIONS_DIR) -> list[tuple[str, Optional[bool]]]:
    """(name, collection exists) per script; None when the script is not collection-based."""
    out: list[tuple[str, Optional[bool]]] = []
    for script in discover_migrations(directory):
        if script.migration is None:
            out.append((script.name, None))
            continue
        out.append((script.name, await script.migration.exists()))
    return out


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9_]+", "_", name.strip().lower()).strip("_")


def new_migration_file(
    directory: Path | str,
    collection: str,
    *,
    timestamp_ms: Optional[int] = None,
) -> Path:
    directory = Path(directory)
    slug = _slug(collection)
    if not slug:
        raise ValueError(f"Invalid collection name: {collection!r}")
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    path = directory / f"{stamp}_{slug}.py"
    if path.exists():
        raise FileExistsError(path)
    directory.mkdir(parents=True, exist_ok=True)
    path.write_text(MIGRATION_TEMPLATE.format(collection=slug), encoding="utf-8")
    return path
