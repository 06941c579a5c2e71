"""Public exports for Notes service data models."""

from __future__ import annotations

from .dto import Note, Record, RecordType

__all__ = [
    "Note",
    "Record",
    "RecordType",
]
