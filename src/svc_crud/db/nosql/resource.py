from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Type

from pydantic import BaseModel

from .record import Record


@dataclass
class NoSqlResource:
    """Declares one REST resource backed by one collection.

    Only ``collection`` and ``record`` are required; everything else is
    derived from the collection name.
    """

    collection: str
    record: Type[Record] = Record
    create_schema: Optional[Type[BaseModel]] = None
    update_schema: Optional[Type[BaseModel]] = None
    prefix: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.collection:
            raise ValueError("NoSqlResource.collection must be a non-empty string")
        if self.prefix is None:
            self.prefix = "/" + self.collection.replace("_", "-")
        if not self.tags:
            self.tags = [self.collection]
