"""Top-level package for the oatmeal session core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .actions import ActionsService
    from .app_state import (
        AppServices,
        AppState,
        AppStateProps,
        CommandOutcome,
        SlashCommandResult,
    )
    from .channel import Channel
    from .commands import SlashCommand
    from .config import ensure_config_dir, load_config
    from .exceptions import (
        ConfigError,
        ConnectorUnavailableError,
        ModelNotFoundError,
        OatmealError,
        StoreError,
    )
    from .persistence import SessionStore

__all__ = [
    "ActionsService",
    "AppServices",
    "AppState",
    "AppStateProps",
    "Channel",
    "CommandOutcome",
    "ConfigError",
    "ConnectorUnavailableError",
    "ModelNotFoundError",
    "OatmealError",
    "SessionStore",
    "SlashCommand",
    "SlashCommandResult",
    "StoreError",
    "ensure_config_dir",
    "load_config",
]


def __getattr__(name: str) -> Any:
    """Lazily import symbols so importing the package stays cheap."""
    if name in {
        "AppServices",
        "AppState",
        "AppStateProps",
        "CommandOutcome",
        "SlashCommandResult",
    }:
        from . import app_state

        return getattr(app_state, name)
    if name in {"ensure_config_dir", "load_config"}:
        from .config import ensure_config_dir, load_config

        return {"ensure_config_dir": ensure_config_dir, "load_config": load_config}[name]
    if name in {
        "ConfigError",
        "ConnectorUnavailableError",
        "ModelNotFoundError",
        "OatmealError",
        "StoreError",
    }:
        from . import exceptions

        return getattr(exceptions, name)
    if name == "ActionsService":
        from .actions import ActionsService

        return ActionsService
    if name == "Channel":
        from .channel import Channel

        return Channel
    if name == "SlashCommand":
        from .commands import SlashCommand

        return SlashCommand
    if name == "SessionStore":
        from .persistence import SessionStore

        return SessionStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
