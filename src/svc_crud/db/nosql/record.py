from __future__ import annotations

import datetime as dt
from typing import Any, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field

from svc_crud.exceptions import PersistenceError

CREATED_FIELD = "createdAt"
DELETED_FIELD = "deletedAt"


class Record(BaseModel):
    """Base schema for a stored document.

    Resources subclass it and add their own fields. ``deletedAt`` is the only
    thing that separates active records from soft-deleted ones.
    """

    id: str = Field(alias="_id")
    createdAt: dt.datetime
    deletedAt: Optional[dt.datetime] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @property
    def is_deleted(self) -> bool:
        return self.deletedAt is not None

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def to_document_id(raw: Any) -> ObjectId:
    if isinstance(raw, ObjectId):
        return raw
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError) as exc:
        raise PersistenceError(str(exc)) from exc


def normalize_document(doc: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(doc)
    for key, value in out.items():
        if isinstance(value, ObjectId):
            out[key] = str(value)
    return out
