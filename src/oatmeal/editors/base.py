"""Editor connector contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import AcceptType, EditorContext


class Editor(ABC):
    """An attached code editor that supplies context and accepts code."""

    name: str = "unknown"

    @abstractmethod
    async def health_check(self) -> None:
        """Raise ``ConnectorUnavailableError`` when the editor is not usable."""

    @abstractmethod
    async def get_context(self) -> EditorContext | None:
        """Return the code surrounding the cursor, or ``None`` when there is none."""

    @abstractmethod
    async def send_response(self, accept_type: AcceptType, text: str) -> None:
        """Write accepted code back into the editor."""
