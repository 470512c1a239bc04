from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from svc_crud.db.nosql.migrations import new_migration_file
from svc_crud.db.nosql.scaffold import default_collection, scaffold_resource_core


def cmd_scaffold_resource(
    entity: str = typer.Option(..., "--entity", help="Entity name, e.g. 'Homeslider' or 'permission_group'."),
    dest_dir: Path = typer.Option(..., "--dest-dir", help="Package directory for the resource module."),
    collection: Optional[str] = typer.Option(None, help="Collection name; defaults to the pluralized snake-case entity."),
    field: List[str] = typer.Option(
        ["name:str"], "--field", "-f", help="Field as name:type (str,int,float,bool,datetime,list,dict). Repeatable."
    ),
    migrations_dir: Optional[Path] = typer.Option(
        None, "--migrations-dir", help="Also write a migration script for the collection here."
    ),
    overwrite: bool = typer.Option(False, help="Overwrite the resource module if present"),
):
    """Emit a resource module (record, create/update schemas, NoSqlResource)."""
    try:
        res = scaffold_resource_core(
            dest_dir=dest_dir,
            entity_name=entity,
            collection=collection,
            fields=field,
            overwrite=overwrite,
        )
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)

    result = res["result"]
    if result["action"] == "skipped":
        typer.echo(f"SKIP {result['path']} (exists). Use --overwrite to replace.")
    else:
        typer.echo(f"WRITE {result['path']}")

    if migrations_dir is not None:
        path = new_migration_file(migrations_dir, collection or default_collection(entity))
        typer.echo(f"WRITE {path}")


def register(app_root: typer.Typer) -> None:
    app_root.command("scaffold-resource")(cmd_scaffold_resource)
