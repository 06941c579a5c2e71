# cloudnotes/services/notes/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class _ServerTimestamp:
    """Field value placeholder resolved to the store's clock at write time."""

    _instance: Optional["_ServerTimestamp"] = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Document:
    id: str
    path: str
    fields: Mapping[str, Any] = field(default_factory=dict)


class WriteKind(str, Enum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Write:
    """One mutation inside an atomic ``DocumentStore.commit`` batch."""

    kind: WriteKind
    path: str
    fields: Mapping[str, Any] = field(default_factory=dict)


def is_valid_id(value: str) -> bool:
    """Whether ``value`` can stand as a single path segment."""
    return bool(value) and "/" not in value


def _segment(value: str, what: str) -> str:
    if not is_valid_id(value):
        raise ValueError(f"Invalid {what}: {value!r}")
    return value


def notes_collection(user_id: str) -> str:
    return f"users/{_segment(user_id, 'user id')}/notes"


def note_path(user_id: str, note_id: str) -> str:
    return f"{notes_collection(user_id)}/{_segment(note_id, 'note id')}"


def records_collection(user_id: str, note_id: str) -> str:
    return f"{note_path(user_id, note_id)}/records"


def record_path(user_id: str, note_id: str, record_id: str) -> str:
    return f"{records_collection(user_id, note_id)}/{_segment(record_id, 'record id')}"


def split_path(path: str) -> tuple[str, str]:
    """Return ``(parent collection, document id)`` for a document path."""
    parent, _, doc_id = path.rpartition("/")
    return parent, doc_id
