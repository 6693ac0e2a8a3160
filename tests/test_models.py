"""Tests for conversation records."""

from __future__ import annotations

import unittest

from oatmeal.models import Author, EditorContext, Message, MessageType


class MessageTests(unittest.TestCase):
    """Validate streaming append and serialisation."""

    def test_append_extends_non_user_messages(self) -> None:
        message = Message(Author.MODEL, "Hel")
        message.append("lo")
        self.assertEqual(message.text, "Hello")

    def test_append_rejects_user_messages(self) -> None:
        message = Message(Author.USER, "hi")
        with self.assertRaises(ValueError):
            message.append("!")
        self.assertEqual(message.text, "hi")

    def test_dict_round_trip_keeps_type(self) -> None:
        message = Message(Author.OATMEAL, "oops", MessageType.ERROR)
        self.assertEqual(Message.from_dict(message.to_dict()), message)
        self.assertTrue(message.is_error)

    def test_from_dict_defaults_to_normal(self) -> None:
        message = Message.from_dict({"author": "User", "text": "hi"})
        self.assertEqual(message.message_type, MessageType.NORMAL)


class EditorContextTests(unittest.TestCase):
    """Validate the context text shown to the user and the backend."""

    def test_format_with_line_range(self) -> None:
        context = EditorContext("src/app.py", "python", "x = 1", 10, 12)
        self.assertEqual(
            context.format(),
            "File: src/app.py (lines 10-12)\n\n```python\nx = 1\n```",
        )

    def test_format_without_lines(self) -> None:
        context = EditorContext("notes.md", "markdown", "# Title")
        self.assertEqual(context.format(), "File: notes.md\n\n```markdown\n# Title\n```")


if __name__ == "__main__":
    unittest.main()
