"""Backend connectors and their registry."""

from __future__ import annotations

from collections.abc import Callable
import logging

from ..exceptions import ConfigError
from .base import Backend
from .ollama import DEFAULT_OLLAMA_URL, OllamaBackend

LOGGER = logging.getLogger(__name__)

BackendFactory = Callable[[], Backend]


class BackendManager:
    """Resolve backend connectors by name."""

    def __init__(self, ollama_url: str = DEFAULT_OLLAMA_URL, timeout: int = 120) -> None:
        self._factories: dict[str, BackendFactory] = {
            "ollama": lambda: OllamaBackend(url=ollama_url, timeout=timeout),
        }
        self._instances: dict[str, Backend] = {}

    def register(self, name: str, factory: BackendFactory) -> None:
        """Register or replace a backend factory."""
        self._factories[name.strip().lower()] = factory
        self._instances.pop(name.strip().lower(), None)

    @property
    def names(self) -> list[str]:
        return sorted(self._factories)

    def get(self, name: str) -> Backend:
        """Return the backend called *name*, raising ``ConfigError`` when unknown."""
        normalized = (name or "").strip().lower()
        if not normalized:
            raise ConfigError("Backend name not set.")
        if normalized not in self._instances:
            factory = self._factories.get(normalized)
            if factory is None:
                raise ConfigError(
                    f"Backend {name!r} is not supported. Choose one of: {', '.join(self.names)}."
                )
            self._instances[normalized] = factory()
            LOGGER.debug(
                "backends.created",
                extra={"event": "backends.created", "backend": normalized},
            )
        return self._instances[normalized]


__all__ = ["Backend", "BackendManager", "OllamaBackend"]
