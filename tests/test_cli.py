"""Tests for the cloudnotes command line interface."""

import asyncio
import json
import os
import tempfile
import unittest
from types import SimpleNamespace
from unittest.mock import patch

import typer
from typer.testing import CliRunner

from cloudnotes.cli.main import app
from cloudnotes.cli.utils import auth
from cloudnotes.cli.utils.notes import (
    parse_record_option,
    parse_record_options,
    record_line,
)
from cloudnotes.config import CloudNotesConfig
from cloudnotes.services.auth import AuthCredentials
from cloudnotes.services.notes import (
    InMemoryDocumentStore,
    NoteService,
    NoteStore,
    Record,
    RecordType,
)


class RecordOptionTest(unittest.TestCase):
    def test_prefixes(self):
        self.assertEqual(parse_record_option("checkbox: Milk"), Record.checkbox("Milk"))
        self.assertEqual(parse_record_option("text:<b>x</b>"), Record.text("<b>x</b>"))
        self.assertEqual(parse_record_option("plain"), Record.text("plain"))
        # Unknown prefixes are part of the content
        self.assertEqual(parse_record_option("note: x"), Record.text("note: x"))

    def test_empty_record_is_rejected(self):
        with self.assertRaises(typer.BadParameter):
            parse_record_options(["checkbox:  "])
        self.assertEqual(parse_record_options(None), [])

    def test_record_line(self):
        self.assertEqual(
            record_line(Record.checkbox("<b>Milk</b>", checked=True)).plain, "[x] Milk"
        )
        self.assertEqual(record_line(Record.checkbox("Eggs")).plain, "[ ] Eggs")
        self.assertEqual(record_line(Record.text("hi")).plain, "    hi")
        line = record_line(Record(content="hi", id="r1"), show_id=True)
        self.assertEqual(line.plain, "    hi  (r1)")


class ConfigTest(unittest.TestCase):
    def test_env_overrides_file(self):
        config = CloudNotesConfig.load(
            {"project_id": "from-file", "api_key": "file-key", "atomic_saves": True},
            env={"CLOUDNOTES_PROJECT_ID": "from-env", "CLOUDNOTES_ATOMIC_SAVES": "no"},
        )
        self.assertEqual(config.project_id, "from-env")
        self.assertEqual(config.api_key, "file-key")
        self.assertFalse(config.atomic_saves)
        self.assertEqual(config.database, "(default)")
        self.assertEqual(config.missing(), [])

    def test_missing(self):
        config = CloudNotesConfig.load({}, env={})
        self.assertEqual(config.missing(), ["project_id", "api_key"])

    def test_emulator_urls(self):
        config = CloudNotesConfig.load(
            {}, env={"CLOUDNOTES_FIRESTORE_URL": "http://localhost:8080/v1"}
        )
        self.assertEqual(config.firestore_url, "http://localhost:8080/v1")


class NotesCommandsTest(unittest.TestCase):
    """Tests for the notes command group."""

    def setUp(self):
        self.runner = CliRunner()
        self.docs = InMemoryDocumentStore()
        self.service = NoteService(
            NoteStore(self.docs),
            SimpleNamespace(current_user_id="u1"),
            notifier=auth.notify,
        )
        patcher = patch(
            "cloudnotes.cli.utils.auth.get_note_service", return_value=self.service
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def _invoke(self, *args):
        return self.runner.invoke(app, ["notes", *args])

    def _only_note(self):
        (note,) = asyncio.run(self.service.list_notes())
        return asyncio.run(self.service.load_note(note.id))

    def _create(self):
        result = self._invoke(
            "create",
            "--title",
            "Groceries",
            "-r",
            "checkbox:Milk",
            "-r",
            "<b>Buy</b> soon",
        )
        self.assertEqual(result.exit_code, 0, result.output)
        return self._only_note()

    def test_create_and_show(self):
        note = self._create()
        self.assertEqual(note.title, "Groceries")
        self.assertEqual(
            [(r.type, r.content) for r in note.records],
            [(RecordType.CHECKBOX, "Milk"), (RecordType.TEXT, "<b>Buy</b> soon")],
        )

        result = self._invoke("show", note.id)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Groceries", result.output)
        self.assertIn("[ ] Milk", result.output)
        self.assertIn("Buy soon", result.output)

    def test_create_blank_title(self):
        result = self._invoke("create", "--title", "   ")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error saving note: Title cannot be empty", result.output)
        self.assertEqual(self.docs.paths, [])

    def test_list(self):
        result = self._invoke("list")
        self.assertIn("No notes found", result.output)
        note = self._create()
        result = self._invoke("list")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(note.id, result.output)
        self.assertIn("Groceries", result.output)

    def test_show_missing(self):
        result = self._invoke("show", "missing")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error loading note", result.output)

    def test_malformed_ids(self):
        result = self._invoke("show", "a/b")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error loading note", result.output)

        result = self._invoke("delete", "--force", "")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error deleting note", result.output)

    def test_check_and_uncheck(self):
        note = self._create()
        milk = note.records[0]

        result = self._invoke("check", note.id, milk.id)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("[x] Milk", result.output)
        self.assertIs(self._only_note().records[0].is_checked, True)

        result = self._invoke("check", "--uncheck", note.id, milk.id)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIs(self._only_note().records[0].is_checked, False)

    def test_check_text_record(self):
        note = self._create()
        result = self._invoke("check", note.id, note.records[1].id)
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Only saved checkbox records can be checked", result.output)

    def test_edit_title_keeps_records(self):
        note = self._create()
        result = self._invoke("edit", "--title", "Shopping", note.id)
        self.assertEqual(result.exit_code, 0, result.output)
        edited = self._only_note()
        self.assertEqual(edited.title, "Shopping")
        self.assertEqual(
            [r.content for r in edited.records], ["Milk", "<b>Buy</b> soon"]
        )

    def test_edit_replaces_records(self):
        note = self._create()
        result = self._invoke("edit", "-r", "checkbox:Bread", note.id)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual([r.content for r in self._only_note().records], ["Bread"])

    def test_delete(self):
        note = self._create()
        result = self._invoke("delete", "--force", note.id)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Note deleted successfully", result.output)
        self.assertEqual(self.docs.paths, [])

    def test_delete_cancelled(self):
        note = self._create()
        result = self.runner.invoke(app, ["notes", "delete", note.id], input="n\n")
        self.assertIn("Deletion cancelled", result.output)
        self.assertEqual(self._only_note().id, note.id)

    def test_export(self):
        note = self._create()
        result = self._invoke("export", note.id)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("<!DOCTYPE html>", result.output)
        self.assertIn("<b>Buy</b> soon", result.output)

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "note.html")
            result = self._invoke("export", "--no-style", "-o", path, note.id)
            self.assertEqual(result.exit_code, 0, result.output)
            with open(path, encoding="utf-8") as f:
                html = f.read()
        self.assertIn("<h1>Groceries</h1>", html)
        self.assertNotIn("<style>", html)


class AuthCommandsTest(unittest.TestCase):
    """Tests for the auth command group against a temporary session file."""

    def setUp(self):
        self.runner = CliRunner()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.session_path = os.path.join(tmp.name, "session.json")
        for name, value in (
            ("config_dir", tmp.name),
            ("session_path", self.session_path),
            ("config_path", os.path.join(tmp.name, "config.json")),
        ):
            patcher = patch.object(auth, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_status_logged_out(self):
        result = self.runner.invoke(app, ["auth", "status"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Not logged in", result.output)

    def test_session_round_trip_and_logout(self):
        auth.save_session(AuthCredentials("uid-1", "id", "refresh", "ada@example.com"))
        with open(self.session_path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["user_id"], "uid-1")

        result = self.runner.invoke(app, ["auth", "status"])
        self.assertIn("ada@example.com", result.output)

        with patch.object(auth, "delete_password_in_keyring") as delete_password:
            result = self.runner.invoke(app, ["auth", "logout"])
        self.assertEqual(result.exit_code, 0, result.output)
        delete_password.assert_called_once_with("ada@example.com")
        self.assertIsNone(auth.load_session())

    def test_notes_require_configuration(self):
        with patch.dict(os.environ, {}, clear=True):
            result = self.runner.invoke(app, ["notes", "list"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Missing settings", result.output)


if __name__ == "__main__":
    unittest.main()
