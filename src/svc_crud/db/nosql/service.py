from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Generic, Iterator, Mapping, Optional, Sequence, TypeVar

from pydantic import ValidationError as PydanticValidationError

from svc_crud.exceptions import NotFound, PersistenceError, ValidationError, format_validation_errors

from .mongo.client import MongoConnection
from .record import Record, normalize_document
from .repository import NoSqlRepository
from .resource import NoSqlResource

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)

CREATED_MESSAGE = "Created successfully"
UPDATED_MESSAGE = "Updated successfully"
DELETED_MESSAGE = "Deleted successfully"
RESTORED_MESSAGE = "Restored successfully"
NOT_FOUND_MESSAGE = "Not found"


class CrudService(Generic[RecordT]):
    """Generic CRUD controller for one resource.

    One instance per resource, all sharing the injected ``MongoConnection``.
    Each operation either returns a result or raises ``ValidationError`` /
    ``NotFound`` / ``PersistenceError``. Nothing is retried. ``update`` reads
    the current document first and rejects a patch that would leave it invalid
    for the record schema, so nothing invalid is written.

    Records are never physically removed: ``destroy`` stamps ``deletedAt`` and
    ``restore`` clears it. Calling ``destroy`` twice re-stamps the timestamp.
    """

    def __init__(
        self,
        resource: NoSqlResource,
        connection: MongoConnection,
        repo: Optional[NoSqlRepository] = None,
    ):
        self.resource = resource
        self.connection = connection
        self.repo = repo or NoSqlRepository(collection_name=resource.collection)

    # ---- hooks (override in subclasses) ----

    async def pre_create(self, data: dict[str, Any]) -> dict[str, Any]:
        return data

    async def pre_update(self, data: dict[str, Any]) -> dict[str, Any]:
        return data

    # ---- helpers ----

    def _to_record(self, doc: Mapping[str, Any]) -> RecordT:
        try:
            return self.resource.record.model_validate(normalize_document(doc))  # type: ignore[return-value]
        except PydanticValidationError as exc:
            raise PersistenceError(
                f"Stored {self.resource.collection} document {doc.get('_id')} "
                f"does not match {self.resource.record.__name__}: {exc}"
            ) from exc

    def _check_patch(self, current: Mapping[str, Any], patch: Mapping[str, Any]) -> None:
        merged = {**normalize_document(current), **normalize_document(patch)}
        try:
            self.resource.record.model_validate(merged)
        except PydanticValidationError as exc:
            raise ValidationError(format_validation_errors(exc.errors())) from exc

    @contextmanager
    def _operation(self, name: str, record_id: Any = None) -> Iterator[None]:
        extra = {"collection": self.resource.collection, "operation": name, "record_id": record_id}
        logger.debug("%s.%s id=%s", self.resource.collection, name, record_id, extra=extra)
        try:
            yield
        except NotFound:
            logger.warning("%s.%s: no record with id %s", self.resource.collection, name, record_id, extra=extra)
            raise
        except PersistenceError as exc:
            logger.error("%s.%s failed: %s", self.resource.collection, name, exc, extra=extra)
            raise

    def _not_found(self, record_id: Any) -> NotFound:
        return NotFound(NOT_FOUND_MESSAGE, record_id=str(record_id))

    # ---- operations ----

    async def create(
        self, payload: Mapping[str, Any], errors: Sequence[Any] = ()
    ) -> tuple[RecordT, str]:
        if errors:
            raise ValidationError(errors)
        with self._operation("create"):
            data = await self.pre_create(dict(payload))
            doc = await self.repo.create(self.connection.database, data)
            record = self._to_record(doc)
        return record, CREATED_MESSAGE

    async def get_all(self) -> list[RecordT]:
        with self._operation("get_all"):
            docs = await self.repo.list(
                self.connection.database,
                deleted=False,
                sort=[(self.repo.created_field, -1)],
            )
            return [self._to_record(d) for d in docs]

    async def get_all_deleted(self) -> list[RecordT]:
        with self._operation("get_all_deleted"):
            docs = await self.repo.list(
                self.connection.database,
                deleted=True,
                sort=[(self.repo.deleted_field, -1)],
            )
            return [self._to_record(d) for d in docs]

    async def get_by_id(self, id: str) -> RecordT:
        with self._operation("get_by_id", id):
            doc = await self.repo.get(self.connection.database, id)
            if doc is None:
                raise self._not_found(id)
            return self._to_record(doc)

    async def update(self, id: str, patch: Mapping[str, Any]) -> tuple[RecordT, str]:
        with self._operation("update", id):
            data = await self.pre_update(dict(patch))
            data.pop("_id", None)
            current = await self.repo.get(self.connection.database, id)
            if current is None:
                raise self._not_found(id)
            self._check_patch(current, data)
            doc = await self.repo.update(self.connection.database, id, data)
            if doc is None:
                raise self._not_found(id)
            record = self._to_record(doc)
        return record, UPDATED_MESSAGE

    async def destroy(self, id: str) -> str:
        with self._operation("destroy", id):
            doc = await self.repo.soft_delete(self.connection.database, id)
            if doc is None:
                raise self._not_found(id)
        return DELETED_MESSAGE

    async def restore(self, id: str) -> str:
        with self._operation("restore", id):
            doc = await self.repo.restore(self.connection.database, id)
            if doc is None:
                raise self._not_found(id)
        return RESTORED_MESSAGE
