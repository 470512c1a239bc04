"""Error taxonomy shared by the repository, the CRUD controller and the HTTP layer.

Each error maps to exactly one HTTP status at the API boundary:

- ``ValidationError``  -> 400 ``{"errors": [...]}``
- ``NotFound``         -> 404 ``{"error": "..."}``
- ``PersistenceError`` -> 500 ``{"error": "..."}``
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence


class SvcCrudError(Exception):
    """Base class for all svc-crud errors."""

    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(SvcCrudError):
    """Client input rejected before anything reached the store."""

    status_code = 400

    def __init__(self, errors: Sequence[Any]) -> None:
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = list(errors)

    def to_payload(self) -> dict[str, Any]:
        return {"errors": self.errors}


class NotFound(SvcCrudError):
    """No record (active or soft-deleted) matches the identifier."""

    status_code = 404

    def __init__(self, message: str = "Not found", *, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


class PersistenceError(SvcCrudError):
    """Any store-level failure: connectivity, malformed query or id, constraint violation."""

    status_code = 500


__all__ = ["SvcCrudError", "ValidationError", "NotFound", "PersistenceError"]


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Reduce pydantic error dicts to JSON-safe field complaints."""
    return [
        {
            "loc": [str(p) for p in e.get("loc", ())],
            "msg": e.get("msg", ""),
            "type": e.get("type", ""),
        }
        for e in errors
    ]
