"""Theme resolution for bubble colours and code highlighting.

A theme is a Pygments style used for syntax highlighting plus the colours of
the user, model, narrator and error bubbles. An optional TOML theme file may
override any of them::

    syntax = "dracula"
    user = "#7aa2f7"
    model = "#9ece6a"
    oatmeal = "#e0af68"
    error = "#f7768e"
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from pathlib import Path
import tomllib
from typing import Any

from pygments.styles import get_all_styles, get_style_by_name
from pygments.util import ClassNotFound
from rich.color import Color, ColorParseError

from ..exceptions import ConfigError
from ..models import Author, Message

LOGGER = logging.getLogger(__name__)

DEFAULT_THEME_NAME = "monokai"

_COLOR_KEYS = ("user", "model", "oatmeal", "error")


@dataclass(frozen=True)
class Theme:
    """Resolved colours and syntax style."""

    name: str
    syntax: str
    user: str = "#7aa2f7"
    model: str = "#9ece6a"
    oatmeal: str = "#e0af68"
    error: str = "#f7768e"

    def color_for(self, message: Message) -> str:
        """Return the border colour of *message*'s bubble."""
        if message.is_error:
            return self.error
        if message.author is Author.USER:
            return self.user
        if message.author is Author.MODEL:
            return self.model
        return self.oatmeal


class ThemeManager:
    """Resolve themes by Pygments style name and optional override file."""

    def available_themes(self) -> list[str]:
        return sorted(get_all_styles())

    def get(self, name: str, file: str = "") -> Theme:
        """Resolve a theme, raising ``ConfigError`` for unknown names or bad files."""
        style_name = (name or DEFAULT_THEME_NAME).strip()
        theme = Theme(name=style_name, syntax=self._validate_style(style_name))

        if file and file.strip():
            theme = self._apply_file(theme, Path(file.strip()).expanduser())

        LOGGER.debug(
            "theme.resolved",
            extra={"event": "theme.resolved", "theme": theme.name, "syntax": theme.syntax},
        )
        return theme

    @staticmethod
    def _validate_style(style_name: str) -> str:
        try:
            get_style_by_name(style_name)
        except ClassNotFound as exc:
            raise ConfigError(
                f"Theme {style_name!r} does not exist. "
                f"Pick one of the Pygments styles, e.g. {DEFAULT_THEME_NAME!r}."
            ) from exc
        return style_name

    def _apply_file(self, theme: Theme, path: Path) -> Theme:
        if not path.is_file():
            raise ConfigError(f"Theme file {path} does not exist.")
        try:
            data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"Theme file {path} could not be parsed: {exc}") from exc

        overrides: dict[str, str] = {}
        syntax = data.get("syntax")
        if syntax is not None:
            if not isinstance(syntax, str):
                raise ConfigError(f"Theme file {path}: syntax must be a string.")
            overrides["syntax"] = self._validate_style(syntax.strip())

        for key in _COLOR_KEYS:
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ConfigError(f"Theme file {path}: {key} must be a colour string.")
            try:
                Color.parse(value.strip())
            except ColorParseError as exc:
                raise ConfigError(
                    f"Theme file {path}: {value!r} is not a valid colour for {key}."
                ) from exc
            overrides[key] = value.strip()

        return replace(theme, name=path.stem, **overrides)
