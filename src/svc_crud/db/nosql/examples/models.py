from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..record import Record
from ..resource import NoSqlResource


class Homeslider(Record):
    """Copy-pasteable example record: one slide of a home page carousel."""

    title: str
    image: str
    link: Optional[str] = None
    position: int = 0


class HomesliderCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    image: str = Field(min_length=1)
    link: Optional[str] = None
    position: int = 0


class HomesliderUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    image: Optional[str] = None
    link: Optional[str] = None
    position: Optional[int] = None


class PermissionGroup(Record):
    name: str
    permissions: list[str] = Field(default_factory=list)


class PermissionGroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    permissions: list[str] = Field(default_factory=list)


class PermissionGroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    permissions: Optional[list[str]] = None


homeslider = NoSqlResource(
    collection="homeslider",
    record=Homeslider,
    create_schema=HomesliderCreate,
    update_schema=HomesliderUpdate,
)

permission_groups = NoSqlResource(
    collection="permission_groups",
    record=PermissionGroup,
    create_schema=PermissionGroupCreate,
    update_schema=PermissionGroupUpdate,
)
