from __future__ import annotations

import datetime as dt
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from svc_crud.exceptions import PersistenceError

from .record import CREATED_FIELD, DELETED_FIELD, to_document_id

SortSpec = Sequence[tuple[str, int]]


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        raise PersistenceError(str(exc)) from exc


class NoSqlRepository:
    """Thin async wrapper around one motor collection.

    - Every method takes the database handle first, so one repository can be
      shared across connections.
    - Returns raw documents (``dict``) or ``None`` when nothing matched.
    - Driver errors surface as ``PersistenceError``.
    """

    def __init__(
        self,
        *,
        collection_name: str,
        created_field: str = CREATED_FIELD,
        deleted_field: str = DELETED_FIELD,
    ):
        self.collection_name = collection_name
        self.created_field = created_field
        self.deleted_field = deleted_field

    def _coll(self, db):
        return db[self.collection_name]

    async def create(self, db, data: dict[str, Any]) -> dict[str, Any]:
        doc = dict(data)
        doc.pop("_id", None)
        doc[self.created_field] = _utcnow()
        doc[self.deleted_field] = None
        with _store_errors():
            res = await self._coll(db).insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def get(self, db, id: Any) -> Optional[dict[str, Any]]:
        oid = to_document_id(id)
        with _store_errors():
            return await self._coll(db).find_one({"_id": oid})

    async def list(
        self,
        db,
        *,
        deleted: bool = False,
        sort: Optional[SortSpec] = None,
    ) -> list[dict[str, Any]]:
        if deleted:
            filt = {self.deleted_field: {"$ne": None}}
        else:
            # matches both missing and null
            filt = {self.deleted_field: None}
        with _store_errors():
            cursor = self._coll(db).find(filt)
            if sort:
                cursor = cursor.sort(list(sort))
            return await cursor.to_list(length=None)

    async def update(self, db, id: Any, data: dict[str, Any]) -> Optional[dict[str, Any]]:
        oid = to_document_id(id)
        patch = {k: v for k, v in data.items() if k != "_id"}
        if not patch:
            return await self.get(db, oid)
        return await self._set(db, oid, patch)

    async def soft_delete(self, db, id: Any) -> Optional[dict[str, Any]]:
        return await self._set(db, to_document_id(id), {self.deleted_field: _utcnow()})

    async def restore(self, db, id: Any) -> Optional[dict[str, Any]]:
        return await self._set(db, to_document_id(id), {self.deleted_field: None})

    async def _set(self, db, oid, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        with _store_errors():
            return await self._coll(db).find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
