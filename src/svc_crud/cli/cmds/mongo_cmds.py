from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Optional

import typer

from svc_crud.db.nosql.migrations import (
    DEFAULT_MIGRATIONS_DIR,
    migration_status,
    new_migration_file,
    run_down,
    run_up,
)
from svc_crud.db.nosql.mongo.settings import get_mongo_settings
from svc_crud.exceptions import PersistenceError

DirOption = typer.Option(Path(DEFAULT_MIGRATIONS_DIR), "--dir", help="Directory holding migration scripts.")
OnlyOption = typer.Option(None, "--only", help="Run a single migration (file stem or collection name).")
UrlOption = typer.Option(None, "--mongo-url", help="Overrides env MONGO_URL for this command.")


def _apply_url(mongo_url: Optional[str]) -> None:
    if mongo_url:
        os.environ["MONGO_URL"] = mongo_url
        get_mongo_settings.cache_clear()


def _run(coro):
    try:
        return asyncio.run(coro)
    except (FileNotFoundError, LookupError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    except PersistenceError as exc:
        typer.echo(f"MongoDB error: {exc}", err=True)
        raise typer.Exit(code=1)


def cmd_up(
    directory: Path = DirOption,
    only: Optional[str] = OnlyOption,
    mongo_url: Optional[str] = UrlOption,
):
    """Create the collections of all (or one) migrations, in file order."""
    _apply_url(mongo_url)
    applied = _run(run_up(directory, only=only))
    for name in applied:
        typer.echo(f"UP   {name}")
    typer.echo(f"{len(applied)} migration(s) applied.")


def cmd_down(
    directory: Path = DirOption,
    only: Optional[str] = OnlyOption,
    mongo_url: Optional[str] = UrlOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """Drop the collections of all (or one) migrations, in reverse file order."""
    _apply_url(mongo_url)
    if not yes:
        target = only or "ALL migrated collections"
        typer.confirm(f"Drop {target} and every record in them?", abort=True)
    reverted = _run(run_down(directory, only=only))
    for name in reverted:
        typer.echo(f"DOWN {name}")
    typer.echo(f"{len(reverted)} migration(s) reverted.")


def cmd_status(
    directory: Path = DirOption,
    mongo_url: Optional[str] = UrlOption,
):
    """Show, per migration, whether its collection exists."""
    _apply_url(mongo_url)
    rows = _run(migration_status(directory))
    for name, exists in rows:
        state = "unknown" if exists is None else ("present" if exists else "absent")
        typer.echo(f"{name:<50} {state}")


def cmd_new(
    collection: str = typer.Argument(..., help="Collection the migration creates/drops."),
    directory: Path = DirOption,
):
    """Write a new timestamped migration script."""
    try:
        path = new_migration_file(directory, collection)
    except (FileExistsError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    typer.echo(f"WRITE {path}")


def register(app_root: typer.Typer) -> None:
    app_root.command("mongo-up")(cmd_up)
    app_root.command("mongo-down")(cmd_down)
    app_root.command("mongo-status")(cmd_status)
    app_root.command("mongo-new")(cmd_new)
