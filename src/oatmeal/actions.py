"""Consumer for side-effecting actions emitted by slash commands."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import TYPE_CHECKING

from .editors import copy_to_clipboard
from .exceptions import OatmealError
from .models import (
    AcceptCodeBlock,
    AcceptType,
    Action,
    Author,
    BackendResponse,
    CopyMessages,
    Message,
)

if TYPE_CHECKING:
    from .channel import Channel
    from .editors import Editor

LOGGER = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], Awaitable[None]]


def format_messages(messages: list[Message]) -> str:
    """Render messages as clipboard text.

    A single message is copied verbatim; several become an ``Author: text``
    transcript separated by blank lines.
    """
    if len(messages) == 1:
        return messages[0].text
    return "\n\n".join(f"{message.author.value}: {message.text}" for message in messages)


class ActionsService:
    """Perform actions in order and report each completion as a narrator reply.

    Completions travel on the same channel as backend replies so the
    controller clears ``waiting_for_backend`` when it folds them in.
    """

    def __init__(
        self,
        editor: Editor,
        responses: Channel[BackendResponse],
        clipboard: ClipboardWriter = copy_to_clipboard,
    ) -> None:
        self.editor = editor
        self.responses = responses
        self._clipboard = clipboard

    async def run(self, actions: Channel[Action]) -> None:
        """Consume *actions* until the channel is closed."""
        async for action in actions:
            await self.handle(action)

    async def handle(self, action: Action) -> None:
        try:
            if isinstance(action, CopyMessages):
                await self._clipboard(format_messages(action.messages))
                text = "Copied to your clipboard."
            elif isinstance(action, AcceptCodeBlock):
                await self.editor.send_response(action.accept_type, action.text)
                verb = "Replaced" if action.accept_type is AcceptType.REPLACE else "Appended"
                text = f"{verb} the code block via {self.editor.name}."
            else:
                raise TypeError(f"Unsupported action {action!r}")
        except OatmealError as exc:
            LOGGER.warning(
                "actions.failed",
                extra={
                    "event": "actions.failed",
                    "action": type(action).__name__,
                    "error": str(exc),
                },
            )
            text = f"That didn't work: {exc}"
        except Exception as exc:
            LOGGER.exception(
                "actions.crashed",
                extra={"event": "actions.crashed", "action": type(action).__name__},
            )
            # The controller is still waiting on this action.
            self.responses.send(
                BackendResponse(
                    author=Author.OATMEAL, text=f"That didn't work: {exc}", done=True
                )
            )
            raise

        LOGGER.info(
            "actions.completed",
            extra={"event": "actions.completed", "action": type(action).__name__},
        )
        self.responses.send(BackendResponse(author=Author.OATMEAL, text=text, done=True))
