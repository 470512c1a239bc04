from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional, Sequence

# field type name -> python annotation used in generated schemas
FIELD_TYPES: dict[str, str] = {
    "str": "str",
    "int": "int",
    "float": "float",
    "bool": "bool",
    "datetime": "dt.datetime",
    "list": "list[Any]",
    "dict": "dict[str, Any]",
}

DEFAULT_FIELDS = ("name:str",)

RESOURCE_TEMPLATE = '''\
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel

from svc_crud.db.nosql import NoSqlResource, Record


class {entity}(Record):
{record_fields}


class {entity}Create(BaseModel):
{create_fields}


class {entity}Update(BaseModel):
{update_fields}


resource = NoSqlResource(
    collection="{collection}",
    record={entity},
    create_schema={entity}Create,
    update_schema={entity}Update,
)
'''

PACKAGE_MARKER = "# package marker\n"


def _pascal(name: str) -> str:
    parts = re.split(r"[^A-Za-z0-9]+", name.strip())
    out = []
    for p in parts:
        if not p:
            continue
        # keep existing inner capitals (WidgetThing stays WidgetThing)
        out.append(p[0].upper() + p[1:])
    return "".join(out)


def _snake(name: str) -> str:
    s = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", _pascal(name))
    return s.lower()


def _plural(word: str) -> str:
    if word.endswith("y") and not word.endswith(("ay", "ey", "iy", "oy", "uy")):
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def default_collection(entity_name: str) -> str:
    return _plural(_snake(entity_name))


def _parse_fields(fields: Sequence[str]) -> list[tuple[str, str]]:
    parsed: list[tuple[str, str]] = []
    for raw in fields:
        name, _, type_name = raw.partition(":")
        name = name.strip()
        type_name = (type_name or "str").strip().lower()
        if not name.isidentifier():
            raise ValueError(f"Invalid field name: {name!r}")
        if name in ("id", "_id", "createdAt", "deletedAt"):
            raise ValueError(f"Field {name!r} is managed by the record base")
        if type_name not in FIELD_TYPES:
            raise ValueError(
                f"Unsupported field type {type_name!r}; expected one of {', '.join(FIELD_TYPES)}"
            )
        parsed.append((name, FIELD_TYPES[type_name]))
    return parsed


def _render_fields(fields: list[tuple[str, str]], *, optional: bool) -> str:
    if not fields:
        return "    pass"
    if optional:
        return "\n".join(f"    {n}: Optional[{t}] = None" for n, t in fields)
    return "\n".join(f"    {n}: {t}" for n, t in fields)


def _ensure_init(dest_dir: Path) -> None:
    init_path = dest_dir / "__init__.py"
    if not init_path.exists():
        init_path.write_text(PACKAGE_MARKER, encoding="utf-8")


def render_resource(entity_name: str, *, collection: Optional[str] = None, fields: Sequence[str] = DEFAULT_FIELDS) -> str:
    entity = _pascal(entity_name)
    if not entity:
        raise ValueError(f"Invalid entity name: {entity_name!r}")
    parsed = _parse_fields(fields)
    return RESOURCE_TEMPLATE.format(
        entity=entity,
        collection=collection or default_collection(entity),
        record_fields=_render_fields(parsed, optional=False),
        create_fields=_render_fields(parsed, optional=False),
        update_fields=_render_fields(parsed, optional=True),
    )


def scaffold_resource_core(
    *,
    dest_dir: Path | str,
    entity_name: str,
    collection: Optional[str] = None,
    fields: Sequence[str] = DEFAULT_FIELDS,
    filename: Optional[str] = None,
    overwrite: bool = False,
) -> dict[str, Any]:
    """Write a resource module (record + create/update schemas + NoSqlResource)."""
    dest = Path(dest_dir)
    content = render_resource(entity_name, collection=collection, fields=fields)
    path = dest / (filename or f"{_snake(entity_name)}.py")

    dest.mkdir(parents=True, exist_ok=True)
    _ensure_init(dest)

    if path.exists() and not overwrite:
        return {"status": "ok", "result": {"action": "skipped", "path": str(path)}}
    path.write_text(content, encoding="utf-8")
    return {"status": "ok", "result": {"action": "wrote", "path": str(path)}}
