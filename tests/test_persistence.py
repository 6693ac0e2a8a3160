"""Tests for session persistence workflows."""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
import time
import unittest

from oatmeal.exceptions import SessionFormatError, SessionNotFoundError, StoreError
from oatmeal.models import Author, EditorContext, Message, MessageType
from oatmeal.persistence import SessionStore


def _messages() -> list[Message]:
    return [
        Message(Author.MODEL, "Hey there! What can I do for you?"),
        Message(Author.USER, "Hello"),
        Message(Author.OATMEAL, "Something broke", MessageType.ERROR),
    ]


class SessionStoreTests(unittest.TestCase):
    """Validate save, load, list and delete behavior."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name) / "sessions"
        self.store = SessionStore(self.directory)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_save_and_load_round_trip(self) -> None:
        context = EditorContext("a.py", "python", "x = 1", 3, 4)
        session_id = self.store.create_id()

        path = self.store.save(session_id, "[1, 2]", context, _messages())
        self.assertEqual(path, self.directory / f"{session_id}.json")

        session = self.store.load(session_id)
        self.assertEqual(session.id, session_id)
        self.assertEqual(session.backend_context, "[1, 2]")
        self.assertEqual(session.editor_context, context)
        self.assertEqual(session.messages, _messages())
        self.assertTrue(session.timestamp)

    def test_saved_file_layout(self) -> None:
        self.store.save("abc", "", None, _messages()[:1])
        data = json.loads((self.directory / "abc.json").read_text(encoding="utf-8"))
        self.assertEqual(data["id"], "abc")
        self.assertEqual(data["state"]["backend_context"], "")
        self.assertIsNone(data["state"]["editor_context"])
        self.assertEqual(
            data["state"]["messages"],
            [
                {
                    "author": "Model",
                    "message_type": "Normal",
                    "text": "Hey there! What can I do for you?",
                }
            ],
        )

    @unittest.skipUnless(os.name == "posix", "POSIX permissions only")
    def test_files_are_private(self) -> None:
        path = self.store.save("private", "", None, _messages())
        self.assertEqual(path.stat().st_mode & 0o777, 0o600)
        self.assertEqual(self.directory.stat().st_mode & 0o777, 0o700)

    def test_create_id_is_unique(self) -> None:
        self.assertNotEqual(self.store.create_id(), self.store.create_id())

    def test_missing_and_invalid_ids_raise_not_found(self) -> None:
        for session_id in ("nope", "../escape", "", "a/b"):
            with self.subTest(session_id=session_id):
                with self.assertRaises(SessionNotFoundError):
                    self.store.load(session_id)

    def test_corrupt_file_raises_format_error(self) -> None:
        self.directory.mkdir(parents=True)
        (self.directory / "bad.json").write_text("{not json", encoding="utf-8")
        (self.directory / "shape.json").write_text(
            json.dumps({"id": "shape", "timestamp": "t", "state": {"messages": [{"author": "Robot"}]}}),
            encoding="utf-8",
        )
        with self.assertRaises(SessionFormatError):
            self.store.load("bad")
        with self.assertRaises(SessionFormatError):
            self.store.load("shape")

    def test_save_to_unwritable_location_raises_store_error(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = SessionStore(blocker / "sessions")
        with self.assertRaises(StoreError):
            store.save("abc", "", None, _messages())

    def test_list_sessions_newest_first_and_skips_bad_files(self) -> None:
        self.store.save("older", "", None, _messages())
        time.sleep(0.01)
        self.store.save("newer", "", None, _messages())
        (self.directory / "junk.json").write_text("[]", encoding="utf-8")

        listed = self.store.list_sessions()
        self.assertEqual([session.id for session in listed], ["newer", "older"])

    def test_list_sessions_without_directory_is_empty(self) -> None:
        self.assertEqual(self.store.list_sessions(), [])
        self.assertEqual(self.store.delete_all(), 0)

    def test_delete_and_delete_all(self) -> None:
        for session_id in ("one", "two", "three"):
            self.store.save(session_id, "", None, _messages())

        self.store.delete("one")
        with self.assertRaises(SessionNotFoundError):
            self.store.load("one")
        with self.assertRaises(SessionNotFoundError):
            self.store.delete("one")

        self.assertEqual(self.store.delete_all(), 2)
        self.assertEqual(self.store.list_sessions(), [])


if __name__ == "__main__":
    unittest.main()
