"""Backend connector contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..channel import Channel
    from ..models import BackendPrompt, BackendResponse


class Backend(ABC):
    """A conversational service that streams completions.

    Implementations report failures by raising; the controller decides which
    failures degrade into in-conversation messages.
    """

    name: str = "unknown"

    @abstractmethod
    async def health_check(self) -> None:
        """Raise ``ConnectorUnavailableError`` when the backend cannot be reached."""

    @abstractmethod
    async def list_models(self) -> list[str]:
        """Return the model names the backend can serve."""

    @abstractmethod
    async def get_completion(
        self,
        prompt: BackendPrompt,
        model: str,
        tx: Channel[BackendResponse],
    ) -> None:
        """Stream the reply to *prompt* into *tx*, ending with a ``done`` chunk."""
