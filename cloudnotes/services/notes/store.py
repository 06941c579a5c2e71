"""
Note/record persistence over a DocumentStore.

Layout:
  users/{userId}/notes/{noteId}                      {title, modifiedAt}
  users/{userId}/notes/{noteId}/records/{recordId}   {content, type, is_checked, order}

The underlying store returns collections unordered; NoteStore restores the
newest-first note order and the record order itself.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .client import DocumentNotFound, FirestoreError
from .documents import DocumentStore
from .domain import (
    SERVER_TIMESTAMP,
    Document,
    Write,
    WriteKind,
    is_valid_id,
    note_path,
    notes_collection,
    record_path,
    records_collection,
)
from .models import Note, Record, RecordType

LOGGER = logging.getLogger(__name__)

UNTITLED = "Untitled"


# ----------------------------- Store Errors ----------------------------------


class NotesError(Exception):
    """Base Notes error."""


class StoreError(NotesError):
    """Transport, permission or backend failure; ``cause`` holds the original."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NotFound(NotesError):
    pass


class NoteNotFound(NotFound):
    pass


class RecordNotFound(NotFound):
    pass


# ------------------------------ NoteStore ------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoteStore:
    """
    CRUD for notes and their records.

    ``atomic_saves`` switches ``save_note`` from the sequential
    delete-all/insert-all steps to a single atomic commit.
    """

    def __init__(
        self,
        documents: DocumentStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
        atomic_saves: bool = False,
    ):
        self._documents = documents
        self._clock = clock
        self._atomic_saves = atomic_saves

    @property
    def documents(self) -> DocumentStore:
        return self._documents

    # -------------------------- Public API methods ---------------------------

    async def list_notes(self, user_id: str) -> List[Note]:
        """All notes of ``user_id``, newest first. Records are not loaded."""
        self._check_ids(user_id)
        LOGGER.debug("notes.store.list user=%s", user_id)
        docs = await self._call(
            "list notes", self._documents.list(notes_collection(user_id))
        )
        fetched_at = self._clock()
        notes = [self._note_from_document(d, fetched_at) for d in docs]
        # sorted() is stable, so equal timestamps keep the fetch order
        notes = sorted(notes, key=lambda n: n.modified_at, reverse=True)
        LOGGER.info("notes.store.list user=%s count=%d", user_id, len(notes))
        return notes

    async def get_note(
        self, user_id: str, note_id: str
    ) -> Tuple[Note, Tuple[Record, ...]]:
        """
        Fetch a note and its records (ordered by ``order``).
        Raises NoteNotFound if the note document doesn't exist.
        """
        self._check_ids(user_id, note_id)
        LOGGER.debug("notes.store.get user=%s id=%s", user_id, note_id)
        doc = await self._call(
            "load note", self._documents.get(note_path(user_id, note_id))
        )
        if doc is None:
            LOGGER.warning("Note not found: %s", note_id)
            raise NoteNotFound(f"Note not found: {note_id}")
        record_docs = await self._call(
            "load records",
            self._documents.list(records_collection(user_id, note_id)),
        )
        records = tuple(
            sorted(
                (self._record_from_document(d) for d in record_docs),
                key=lambda r: r.order,
            )
        )
        note = self._note_from_document(doc, self._clock()).with_records(records)
        LOGGER.info("notes.store.get id=%s records=%d", note_id, len(records))
        return note, records

    def allocate_note_id(self, user_id: str) -> str:
        """Reserve an identifier for a note that has not been saved yet."""
        self._check_ids(user_id)
        return self._documents.new_id()

    async def save_note(
        self, user_id: str, note: Note, records: Sequence[Record]
    ) -> str:
        """
        Upsert the note and replace all of its records. Returns the note id.

        Non-atomic by default: a failure after the old records are gone leaves
        the note with whatever was inserted so far.
        """
        self._check_ids(user_id, note.id or None)
        note_id = note.id or self.allocate_note_id(user_id)
        path = note_path(user_id, note_id)
        note_fields = {"title": note.title, "modifiedAt": SERVER_TIMESTAMP}
        LOGGER.debug(
            "notes.store.save user=%s id=%s new=%s records=%d",
            user_id,
            note_id,
            note.is_new,
            len(records),
        )
        if self._atomic_saves:
            await self._save_atomic(user_id, note_id, note_fields, records)
        else:
            await self._call("save note", self._documents.set(path, note_fields))
            await self._delete_records(user_id, note_id)
            collection = records_collection(user_id, note_id)
            for index, record in enumerate(records):
                await self._call(
                    "insert record",
                    self._documents.add(collection, self._record_fields(record, index)),
                )
        LOGGER.info("notes.store.saved id=%s records=%d", note_id, len(records))
        return note_id

    async def delete_note(self, user_id: str, note_id: str) -> None:
        """Delete every record, then the note document itself."""
        self._check_ids(user_id, note_id)
        LOGGER.debug("notes.store.delete user=%s id=%s", user_id, note_id)
        await self._delete_records(user_id, note_id)
        await self._call(
            "delete note", self._documents.delete(note_path(user_id, note_id))
        )
        LOGGER.info("notes.store.deleted id=%s", note_id)

    async def update_record(
        self, user_id: str, note_id: str, record_id: str, record: Record
    ) -> None:
        """Replace one record's content, type and checked state; keep its order."""
        self._check_ids(user_id, note_id, record_id)
        path = record_path(user_id, note_id, record_id)
        fields = {
            "content": record.content,
            "type": record.type.value,
            "is_checked": record.is_checked,
        }
        LOGGER.debug("notes.store.update_record note=%s record=%s", note_id, record_id)
        try:
            await self._documents.update(path, fields)
        except DocumentNotFound as e:
            LOGGER.warning("Record not found: %s/%s", note_id, record_id)
            raise RecordNotFound(f"Record not found: {record_id}") from e
        except FirestoreError as e:
            raise StoreError(f"Failed to update record: {e}", cause=e) from e

    # -------------------------- Internal helpers -----------------------------

    @staticmethod
    def _check_ids(
        user_id: str, note_id: Optional[str] = None, record_id: Optional[str] = None
    ) -> None:
        # Ids that cannot be a path segment name no stored document.
        if not is_valid_id(user_id):
            raise StoreError(f"Invalid user id: {user_id!r}")
        if note_id is not None and not is_valid_id(note_id):
            raise NoteNotFound(f"Note not found: {note_id!r}")
        if record_id is not None and not is_valid_id(record_id):
            raise RecordNotFound(f"Record not found: {record_id!r}")

    @staticmethod
    async def _call(action: str, awaitable):
        try:
            return await awaitable
        except FirestoreError as e:
            LOGGER.error("notes.store.failed action=%s err=%s", action, e)
            raise StoreError(f"Failed to {action}: {e}", cause=e) from e

    async def _delete_records(self, user_id: str, note_id: str) -> None:
        """Delete all records of a note; every deletion must finish first."""
        docs = await self._call(
            "list records", self._documents.list(records_collection(user_id, note_id))
        )
        if not docs:
            return
        results = await asyncio.gather(
            *(self._documents.delete(d.path) for d in docs), return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            if not isinstance(failure, FirestoreError):
                raise failure
        if failures:
            LOGGER.error(
                "notes.store.delete_records_failed id=%s failed=%d of %d",
                note_id,
                len(failures),
                len(docs),
            )
            raise StoreError(
                f"Failed to delete {len(failures)} of {len(docs)} records: "
                f"{failures[0]}",
                cause=failures[0],
            )
        LOGGER.debug("notes.store.records_deleted id=%s count=%d", note_id, len(docs))

    async def _save_atomic(
        self,
        user_id: str,
        note_id: str,
        note_fields: Dict[str, Any],
        records: Sequence[Record],
    ) -> None:
        existing = await self._call(
            "list records", self._documents.list(records_collection(user_id, note_id))
        )
        writes: List[Write] = [
            Write(WriteKind.SET, note_path(user_id, note_id), note_fields)
        ]
        writes.extend(Write(WriteKind.DELETE, d.path) for d in existing)
        for index, record in enumerate(records):
            path = record_path(user_id, note_id, self._documents.new_id())
            fields = self._record_fields(record, index)
            writes.append(Write(WriteKind.SET, path, fields))
        await self._call("save note", self._documents.commit(writes))

    @staticmethod
    def _record_fields(record: Record, index: int) -> Dict[str, Any]:
        # Checked state is not carried over on save; checkboxes start unchecked.
        return {
            "content": record.content,
            "type": record.type.value,
            "is_checked": False if record.is_checkbox else None,
            "order": index,
        }

    @staticmethod
    def _note_from_document(doc: Document, fetched_at: datetime) -> Note:
        title = doc.fields.get("title")
        modified = doc.fields.get("modifiedAt")
        return Note(
            id=doc.id,
            title=title if isinstance(title, str) else UNTITLED,
            modified_at=modified if isinstance(modified, datetime) else fetched_at,
        )

    @staticmethod
    def _record_from_document(doc: Document) -> Record:
        fields = doc.fields
        rtype = RecordType.parse(fields.get("type"))
        content = fields.get("content")
        order = fields.get("order")
        checked = fields.get("is_checked")
        if rtype is RecordType.CHECKBOX:
            is_checked: Optional[bool] = bool(checked) if checked is not None else False
        else:
            is_checked = None
        return Record(
            type=rtype,
            content=content if isinstance(content, str) else "",
            is_checked=is_checked,
            order=int(order) if isinstance(order, int) else 0,
            id=doc.id,
        )
