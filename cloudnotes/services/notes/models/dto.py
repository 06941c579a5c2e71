"""High-level Notes data transfer objects."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Tuple


class RecordType(str, Enum):
    TEXT = "text"
    CHECKBOX = "checkbox"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RecordType":
        """Lenient conversion used when reading stored documents."""
        try:
            return cls(value)
        except ValueError:
            return cls.TEXT


@dataclass(frozen=True)
class Record:
    """One content unit of a note: free text or a checkbox item.

    ``is_checked`` is set for checkbox records and ``None`` for text records.
    ``id`` is the store-assigned document id; records built in memory have none.
    """

    type: RecordType = RecordType.TEXT
    content: str = ""
    is_checked: Optional[bool] = None
    order: int = 0
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, RecordType):
            object.__setattr__(self, "type", RecordType(self.type))
        if self.type is RecordType.CHECKBOX and self.is_checked is None:
            raise ValueError("checkbox records need an is_checked value")
        if self.type is RecordType.TEXT and self.is_checked is not None:
            raise ValueError("text records cannot carry is_checked")

    @classmethod
    def text(cls, content: str) -> "Record":
        return cls(type=RecordType.TEXT, content=content)

    @classmethod
    def checkbox(cls, content: str, checked: bool = False) -> "Record":
        return cls(type=RecordType.CHECKBOX, content=content, is_checked=checked)

    @property
    def is_checkbox(self) -> bool:
        return self.type is RecordType.CHECKBOX

    def with_checked(self, checked: bool) -> "Record":
        if not self.is_checkbox:
            raise ValueError("only checkbox records can be checked")
        return replace(self, is_checked=checked)


@dataclass(frozen=True)
class Note:
    """Immutable note snapshot; ``id`` is empty until the first save."""

    title: str = ""
    id: str = ""
    modified_at: Optional[datetime] = None
    records: Tuple[Record, ...] = field(default_factory=tuple)

    @property
    def is_new(self) -> bool:
        return not self.id

    def with_records(self, records: Iterable[Record]) -> "Note":
        return replace(self, records=tuple(records))
