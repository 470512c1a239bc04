from __future__ import annotations

from typing import Annotated, Any, Optional, Type

from fastapi import APIRouter, Body
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from svc_crud.db.nosql.service import CrudService
from svc_crud.exceptions import ValidationError, format_validation_errors

JsonBody = Annotated[dict[str, Any], Body()]


def _validate(
    schema: Optional[Type[BaseModel]], body: dict[str, Any], *, partial: bool
) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    if schema is None:
        return body, []
    try:
        model = schema.model_validate(body)
    except PydanticValidationError as exc:
        return body, format_validation_errors(exc.errors())
    return model.model_dump(exclude_unset=partial), []


def make_crud_router(service: CrudService) -> APIRouter:
    """
    Build the REST surface for one resource.

    Routes (relative to the resource prefix):
        POST   ""              create         -> {data, message}
        GET    ""              active records, newest first
        GET    "/deleted"      soft-deleted records, most recently deleted first
        GET    "/{id}"         one record, active or deleted
        PUT    "/{id}"         update         -> {data, message}
        PATCH  "/{id}"         update         -> {data, message}
        DELETE "/{id}"         soft delete    -> {message}
        POST   "/{id}/restore" restore        -> {message}

    Errors are raised as svc_crud exceptions and rendered by the handlers from
    ``register_error_handlers``.
    """
    resource = service.resource
    name = resource.collection
    router = APIRouter(prefix=resource.prefix or "", tags=list(resource.tags))

    @router.post("", name=f"create_{name}")
    async def create_record(body: JsonBody):
        payload, errors = _validate(resource.create_schema, body, partial=False)
        record, message = await service.create(payload, errors)
        return {"data": record.to_public(), "message": message}

    @router.get("", name=f"list_{name}")
    async def list_records():
        return [r.to_public() for r in await service.get_all()]

    # declared before "/{id}" so "deleted" is not taken for an id
    @router.get("/deleted", name=f"list_deleted_{name}")
    async def list_deleted_records():
        return [r.to_public() for r in await service.get_all_deleted()]

    @router.get("/{id}", name=f"get_{name}")
    async def get_record(id: str):
        return (await service.get_by_id(id)).to_public()

    @router.api_route("/{id}", methods=["PUT", "PATCH"], name=f"update_{name}")
    async def update_record(id: str, body: JsonBody):
        patch, errors = _validate(resource.update_schema, body, partial=True)
        if errors:
            raise ValidationError(errors)
        record, message = await service.update(id, patch)
        return {"data": record.to_public(), "message": message}

    @router.delete("/{id}", name=f"delete_{name}")
    async def delete_record(id: str):
        return {"message": await service.destroy(id)}

    @router.post("/{id}/restore", name=f"restore_{name}")
    async def restore_record(id: str):
        return {"message": await service.restore(id)}

    return router
