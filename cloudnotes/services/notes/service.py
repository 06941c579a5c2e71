"""
High-level Notes service.

Public API:
  - NoteService.list_notes() -> List[Note]
  - NoteService.load_note(note_id) -> Note
  - NoteService.save_note(note, records=None) -> Note
  - NoteService.delete_note(note_id) -> None
  - NoteService.update_record(note_id, record_id, record) -> None
  - NoteService.set_checked(note_id, record, checked) -> Record
  - NoteService.store -> NoteStore (escape hatch)

Operations run for the signed-in user of the session provider. Failures are
logged, reported through the notifier as a short message, and re-raised.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Optional, Protocol, Sequence

from .models import Note, Record
from .store import NotesError, NoteStore

LOGGER = logging.getLogger(__name__)

Notifier = Callable[[str], None]


# ----------------------------- Service Errors --------------------------------


class ValidationError(NotesError):
    """A client-side precondition was violated; nothing was sent."""


class NotAuthenticated(NotesError):
    pass


class SessionProvider(Protocol):
    @property
    def current_user_id(self) -> Optional[str]: ...


def _log_notifier(message: str) -> None:
    LOGGER.info("notes.notify %s", message)


# ----------------------------- NoteService -----------------------------------


class NoteService:
    def __init__(
        self,
        store: NoteStore,
        session: SessionProvider,
        *,
        notifier: Optional[Notifier] = None,
    ):
        self._store = store
        self._session = session
        self._notify = notifier or _log_notifier

    @property
    def store(self) -> NoteStore:
        return self._store

    # -------------------------- Public API methods ---------------------------

    async def list_notes(self) -> List[Note]:
        """Notes of the signed-in user, most recently modified first."""
        try:
            return await self._store.list_notes(self._user_id())
        except NotesError as e:
            self._report("Error loading notes", e)
            raise

    async def load_note(self, note_id: str) -> Note:
        """Fetch a note with its records attached, in display order."""
        try:
            note, _ = await self._store.get_note(self._user_id(), note_id)
        except NotesError as e:
            self._report("Error loading note", e)
            raise
        return note

    async def save_note(
        self, note: Note, records: Optional[Sequence[Record]] = None
    ) -> Note:
        """
        Persist ``note`` with ``records`` (defaults to ``note.records``),
        replacing whatever records the note had. Returns the saved snapshot.
        Raises ValidationError for a blank title before touching the store.
        """
        snapshot = tuple(note.records if records is None else records)
        try:
            if not note.title or not note.title.strip():
                raise ValidationError("Title cannot be empty")
            user_id = self._user_id()
            note_id = note.id or self._store.allocate_note_id(user_id)
            await self._store.save_note(user_id, replace(note, id=note_id), snapshot)
        except NotesError as e:
            self._report("Error saving note", e)
            raise
        self._notify("Note saved successfully")
        saved = tuple(
            replace(
                r,
                order=i,
                is_checked=False if r.is_checkbox else None,
                id=None,
            )
            for i, r in enumerate(snapshot)
        )
        return replace(note, id=note_id, records=saved)

    async def delete_note(self, note_id: str) -> None:
        """Delete the note and all of its records."""
        try:
            await self._store.delete_note(self._user_id(), note_id)
        except NotesError as e:
            self._report("Error deleting note", e)
            raise
        self._notify("Note deleted successfully")

    async def update_record(
        self, note_id: str, record_id: str, record: Record
    ) -> None:
        try:
            await self._store.update_record(
                self._user_id(), note_id, record_id, record
            )
        except NotesError as e:
            self._report("Error updating record", e)
            raise

    async def set_checked(
        self, note_id: str, record: Record, checked: bool
    ) -> Record:
        """Check or uncheck a stored checkbox record; returns the updated record."""
        if not record.is_checkbox or not record.id:
            err = ValidationError("Only saved checkbox records can be checked")
            self._report("Error updating record", err)
            raise err
        updated = record.with_checked(checked)
        await self.update_record(note_id, record.id, updated)
        return updated

    # -------------------------- Internal helpers -----------------------------

    def _user_id(self) -> str:
        user_id = self._session.current_user_id
        if not user_id:
            raise NotAuthenticated("User not authenticated")
        return user_id

    def _report(self, action: str, err: NotesError) -> None:
        LOGGER.warning("notes.service.failed action=%r err=%s", action, err)
        self._notify(f"{action}: {err}")
