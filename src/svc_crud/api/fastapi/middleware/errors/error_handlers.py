from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from svc_crud.exceptions import (
    NotFound,
    PersistenceError,
    SvcCrudError,
    ValidationError,
    format_validation_errors,
)

logger = logging.getLogger(__name__)


def _log_extra(request: Request, status: int) -> dict[str, Any]:
    return {"http_method": request.method, "path": request.url.path, "status_code": status}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"errors": format_validation_errors(exc.errors())})

    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(PersistenceError)
    async def _persistence(request: Request, exc: PersistenceError):
        logger.error(
            "PersistenceError on %s (500): %s", request.url.path, exc.message, extra=_log_extra(request, 500)
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(SvcCrudError)
    async def _svc_crud(request: Request, exc: SvcCrudError):
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
