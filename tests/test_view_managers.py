"""Tests for bubble layout, scrolling and theme resolution."""

from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from oatmeal.exceptions import ConfigError
from oatmeal.managers import DEFAULT_THEME_NAME, BubbleList, Scroll, ThemeManager
from oatmeal.models import Author, Message, MessageType


class ScrollTests(unittest.TestCase):
    """Validate position clamping."""

    def test_set_state_clamps_position(self) -> None:
        scroll = Scroll()
        scroll.set_state(30, 10)
        scroll.last()
        self.assertEqual(scroll.position, 20)
        scroll.set_state(12, 10)
        self.assertEqual(scroll.position, 2)
        scroll.set_state(5, 10)
        self.assertEqual(scroll.position, 0)
        self.assertTrue(scroll.at_bottom)

    def test_movement_stays_in_bounds(self) -> None:
        scroll = Scroll()
        scroll.set_state(25, 10)
        scroll.up()
        self.assertEqual(scroll.position, 0)
        scroll.down(3)
        self.assertEqual(scroll.position, 3)
        scroll.down_page()
        self.assertEqual(scroll.position, 13)
        scroll.down_page()
        self.assertEqual(scroll.position, 15)
        scroll.up_page()
        self.assertEqual(scroll.position, 5)
        scroll.first()
        self.assertEqual(scroll.position, 0)


class ThemeManagerTests(unittest.TestCase):
    """Validate style lookup and theme files."""

    def test_default_theme_resolves(self) -> None:
        manager = ThemeManager()
        theme = manager.get(DEFAULT_THEME_NAME)
        self.assertEqual(theme.syntax, DEFAULT_THEME_NAME)
        self.assertIn(DEFAULT_THEME_NAME, manager.available_themes())

    def test_unknown_style_raises_config_error(self) -> None:
        with self.assertRaises(ConfigError):
            ThemeManager().get("definitely-not-a-style")

    def test_theme_file_overrides_colours_and_syntax(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "dusk.toml"
            path.write_text(
                'syntax = "friendly"\nuser = "#112233"\nerror = "red"\n',
                encoding="utf-8",
            )
            theme = ThemeManager().get("monokai", str(path))

        self.assertEqual(theme.name, "dusk")
        self.assertEqual(theme.syntax, "friendly")
        self.assertEqual(theme.user, "#112233")
        self.assertEqual(theme.error, "red")
        self.assertEqual(
            theme.color_for(Message(Author.MODEL, "x", MessageType.ERROR)), "red"
        )
        self.assertEqual(theme.color_for(Message(Author.USER, "x")), "#112233")

    def test_invalid_theme_files_raise_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "missing.toml"
            broken = Path(temp_dir) / "broken.toml"
            broken.write_text("user = ", encoding="utf-8")
            bad_colour = Path(temp_dir) / "colour.toml"
            bad_colour.write_text('model = "not a colour"\n', encoding="utf-8")

            for path in (missing, broken, bad_colour):
                with self.subTest(path=path.name):
                    with self.assertRaises(ConfigError):
                        ThemeManager().get("monokai", str(path))


class BubbleListTests(unittest.TestCase):
    """Validate rendered layout of the message history."""

    def setUp(self) -> None:
        self.bubbles = BubbleList(ThemeManager().get("monokai"))

    def test_zero_width_renders_nothing(self) -> None:
        self.bubbles.set_messages([Message(Author.MODEL, "hello")], 0)
        self.assertEqual(len(self.bubbles), 0)

    def test_lines_fit_the_viewport(self) -> None:
        messages = [
            Message(Author.MODEL, "Hey there! What can I do for you?"),
            Message(Author.USER, "word " * 40),
        ]
        self.bubbles.set_messages(messages, 50)
        plain = self.bubbles.plain_lines()

        self.assertGreater(len(self.bubbles), 4)
        self.assertTrue(all(len(line) <= 50 for line in plain))
        joined = "\n".join(plain)
        self.assertIn("Model", joined)
        self.assertIn("User", joined)
        self.assertIn("What can I do for you?", joined)

    def test_user_bubbles_are_right_aligned(self) -> None:
        self.bubbles.set_messages([Message(Author.USER, "hi")], 60)
        first = self.bubbles.plain_lines()[0]
        self.assertTrue(first.startswith(" "))

        self.bubbles.set_messages([Message(Author.MODEL, "hi")], 60)
        self.assertFalse(self.bubbles.plain_lines()[0].startswith(" "))

    def test_code_blocks_are_numbered_across_messages(self) -> None:
        messages = [
            Message(Author.MODEL, "```python\na = 1\n```"),
            Message(Author.USER, "```python\nnot numbered\n```"),
            Message(Author.MODEL, "Then:\n```python\nb = 2\n```"),
        ]
        self.bubbles.set_messages(messages, 70)
        joined = "\n".join(self.bubbles.plain_lines())

        self.assertIn("(1)", joined)
        self.assertIn("(2)", joined)
        self.assertNotIn("(3)", joined)
        self.assertIn("b = 2", joined)

    def test_growing_message_changes_layout(self) -> None:
        message = Message(Author.MODEL, "short")
        self.bubbles.set_messages([message], 40)
        before = len(self.bubbles)
        message.append("\nline two\nline three")
        self.bubbles.set_messages([message], 40)
        self.assertGreater(len(self.bubbles), before)


if __name__ == "__main__":
    unittest.main()
