"""Editor stand-ins that do not talk to a real editor process."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pyperclip

from ..exceptions import ConnectorUnavailableError
from .base import Editor

if TYPE_CHECKING:
    from ..models import AcceptType, EditorContext

LOGGER = logging.getLogger(__name__)


async def copy_to_clipboard(text: str) -> None:
    """Copy *text* to the system clipboard without blocking the event loop."""
    try:
        await asyncio.to_thread(pyperclip.copy, text)
    except pyperclip.PyperclipException as exc:
        raise ConnectorUnavailableError(f"Clipboard is not available: {exc}") from exc


class ClipboardEditor(Editor):
    """Accepted code lands on the clipboard for pasting into any editor."""

    name = "clipboard"

    async def health_check(self) -> None:
        return None

    async def get_context(self) -> EditorContext | None:
        return None

    async def send_response(self, accept_type: AcceptType, text: str) -> None:
        await copy_to_clipboard(text)
        LOGGER.info(
            "editor.clipboard.copied",
            extra={
                "event": "editor.clipboard.copied",
                "accept_type": accept_type.value,
                "chars": len(text),
            },
        )


class NoopEditor(Editor):
    """No editor integration; accepted code is dropped."""

    name = "none"

    async def health_check(self) -> None:
        return None

    async def get_context(self) -> EditorContext | None:
        return None

    async def send_response(self, accept_type: AcceptType, text: str) -> None:
        LOGGER.debug(
            "editor.none.discarded",
            extra={"event": "editor.none.discarded", "accept_type": accept_type.value},
        )
