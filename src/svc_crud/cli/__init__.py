from __future__ import annotations

import os
from typing import Optional

import typer

from svc_crud.app.core.logging import setup_logging

from .cmds import register_mongo, register_scaffold

CLI_DEFAULT_LOG_LEVEL = "WARNING"

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Document-store CRUD service tooling: collection migrations and resource scaffolding.",
)


@app.callback()
def _root(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides env LOG_LEVEL."),
):
    setup_logging(level=log_level or os.getenv("LOG_LEVEL") or CLI_DEFAULT_LOG_LEVEL, fmt=os.getenv("LOG_FORMAT"))


register_mongo(app)
register_scaffold(app)


def main():
    app()


__all__ = ["app", "main"]
