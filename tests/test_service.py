"""Tests for NoteService."""

import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import requests

from cloudnotes.services.notes import (
    FirestoreClient,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    NotAuthenticated,
    Note,
    NoteNotFound,
    NoteService,
    NoteStore,
    Record,
    StoreError,
    ValidationError,
)
from cloudnotes.services.notes.client import FirestoreApiError


class NoteServiceTest(unittest.IsolatedAsyncioTestCase):
    """Tests for NoteService."""

    def setUp(self):
        self.docs = InMemoryDocumentStore()
        self.store = NoteStore(self.docs)
        self.session = SimpleNamespace(current_user_id="u1")
        self.messages = []
        self.service = NoteService(
            self.store, self.session, notifier=self.messages.append
        )

    async def test_save_new_note(self):
        saved = await self.service.save_note(
            Note(title="Groceries"),
            [Record.checkbox("Milk", checked=True), Record.text("soon")],
        )
        self.assertTrue(saved.id)
        self.assertEqual(self.messages, ["Note saved successfully"])
        self.assertEqual([r.order for r in saved.records], [0, 1])
        self.assertIs(saved.records[0].is_checked, False)

        loaded = await self.service.load_note(saved.id)
        self.assertEqual(loaded.title, "Groceries")
        self.assertEqual(
            [(r.content, r.type, r.order) for r in loaded.records],
            [(r.content, r.type, r.order) for r in saved.records],
        )

    async def test_save_uses_note_records_by_default(self):
        note = Note(title="T", records=(Record.text("a"), Record.text("b")))
        saved = await self.service.save_note(note)
        loaded = await self.service.load_note(saved.id)
        self.assertEqual([r.content for r in loaded.records], ["a", "b"])

    async def test_save_existing_keeps_id(self):
        first = await self.service.save_note(Note(title="T"), [Record.text("a")])
        second = await self.service.save_note(
            Note(title="T2", id=first.id), [Record.text("b")]
        )
        self.assertEqual(first.id, second.id)
        notes = await self.service.list_notes()
        self.assertEqual([n.title for n in notes], ["T2"])

    async def test_blank_title_is_rejected_before_store(self):
        for title in ("", "   "):
            with self.subTest(title=title):
                with self.assertRaises(ValidationError):
                    await self.service.save_note(Note(title=title), [Record.text("x")])
        self.assertEqual(self.docs.paths, [])
        self.assertEqual(
            self.messages, ["Error saving note: Title cannot be empty"] * 2
        )

    async def test_not_authenticated(self):
        self.session.current_user_id = None
        with self.assertRaises(NotAuthenticated):
            await self.service.save_note(Note(title="T"), [])
        with self.assertRaises(NotAuthenticated):
            await self.service.list_notes()
        self.assertEqual(self.docs.paths, [])
        self.assertEqual(
            self.messages[0], "Error saving note: User not authenticated"
        )

    async def test_load_missing_note(self):
        with self.assertRaises(NoteNotFound):
            await self.service.load_note("missing")
        self.assertTrue(self.messages[0].startswith("Error loading note"))

    async def test_delete_note(self):
        saved = await self.service.save_note(Note(title="T"), [Record.text("a")])
        await self.service.delete_note(saved.id)
        self.assertEqual(self.messages[-1], "Note deleted successfully")
        self.assertEqual(await self.service.list_notes(), [])
        self.assertEqual(self.docs.paths, [])

    async def test_store_failure_is_reported_and_raised(self):
        failing = MagicMock(spec=NoteStore)
        err = StoreError("Failed to list notes: HTTP 500", FirestoreApiError("x"))
        failing.list_notes = AsyncMock(side_effect=err)
        service = NoteService(failing, self.session, notifier=self.messages.append)
        with self.assertRaises(StoreError):
            await service.list_notes()
        self.assertEqual(
            self.messages, ["Error loading notes: Failed to list notes: HTTP 500"]
        )

    async def test_network_timeout_is_reported_and_raised(self):
        http = MagicMock()
        http.request.side_effect = requests.Timeout("read timed out")
        store = NoteStore(FirestoreDocumentStore(FirestoreClient("p", http)))
        service = NoteService(store, self.session, notifier=self.messages.append)
        with self.assertRaises(StoreError):
            await service.save_note(Note(title="T"), [Record.text("a")])
        (message,) = self.messages
        self.assertTrue(message.startswith("Error saving note: Failed to save note"))
        self.assertIn("read timed out", message)

    async def test_set_checked(self):
        saved = await self.service.save_note(
            Note(title="T"), [Record.checkbox("a"), Record.checkbox("b")]
        )
        loaded = await self.service.load_note(saved.id)

        updated = await self.service.set_checked(saved.id, loaded.records[1], True)
        self.assertIs(updated.is_checked, True)

        reloaded = await self.service.load_note(saved.id)
        self.assertEqual([r.is_checked for r in reloaded.records], [False, True])
        self.assertEqual([r.content for r in reloaded.records], ["a", "b"])

    async def test_set_checked_rejects_text_and_unsaved(self):
        saved = await self.service.save_note(Note(title="T"), [Record.text("a")])
        loaded = await self.service.load_note(saved.id)
        with self.assertRaises(ValidationError):
            await self.service.set_checked(saved.id, loaded.records[0], True)
        with self.assertRaises(ValidationError):
            await self.service.set_checked(saved.id, Record.checkbox("new"), True)

    def test_escape_hatches(self):
        self.assertIs(self.service.store, self.store)
        self.assertIs(self.service.store.documents, self.docs)

    async def test_default_notifier_logs(self):
        service = NoteService(self.store, self.session)
        with self.assertLogs("cloudnotes.services.notes.service", level="INFO") as cm:
            await service.save_note(Note(title="T"), [])
        self.assertTrue(any("Note saved successfully" in line for line in cm.output))


if __name__ == "__main__":
    unittest.main()
