"""Editor connectors and their registry."""

from __future__ import annotations

from collections.abc import Callable
import logging

from ..exceptions import ConfigError
from .base import Editor
from .clipboard import ClipboardEditor, NoopEditor, copy_to_clipboard

LOGGER = logging.getLogger(__name__)

EditorFactory = Callable[[], Editor]


class EditorManager:
    """Resolve editor connectors by name."""

    def __init__(self) -> None:
        self._factories: dict[str, EditorFactory] = {
            "clipboard": ClipboardEditor,
            "none": NoopEditor,
        }
        self._instances: dict[str, Editor] = {}

    def register(self, name: str, factory: EditorFactory) -> None:
        """Register or replace an editor factory."""
        self._factories[name.strip().lower()] = factory
        self._instances.pop(name.strip().lower(), None)

    @property
    def names(self) -> list[str]:
        return sorted(self._factories)

    def get(self, name: str) -> Editor:
        """Return the editor called *name*, raising ``ConfigError`` when unknown."""
        normalized = (name or "").strip().lower()
        if not normalized:
            raise ConfigError("Editor name not set.")
        if normalized not in self._instances:
            factory = self._factories.get(normalized)
            if factory is None:
                raise ConfigError(
                    f"Editor {name!r} is not supported. Choose one of: {', '.join(self.names)}."
                )
            self._instances[normalized] = factory()
        return self._instances[normalized]


__all__ = [
    "ClipboardEditor",
    "Editor",
    "EditorManager",
    "NoopEditor",
    "copy_to_clipboard",
]
