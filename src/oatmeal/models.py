"""Conversation records shared by the controller and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Author(str, Enum):
    """Who produced a message."""

    USER = "User"
    MODEL = "Model"
    OATMEAL = "Oatmeal"


class MessageType(str, Enum):
    """Presentation category of a message."""

    NORMAL = "Normal"
    ERROR = "Error"


class AcceptType(str, Enum):
    """How accepted code is written back into the editor."""

    APPEND = "Append"
    REPLACE = "Replace"


@dataclass
class Message:
    """A single conversation turn.

    Only ``append`` mutates a message, and only for messages that did not come
    from the user; streamed replies accumulate into one bubble this way.
    """

    author: Author
    text: str
    message_type: MessageType = MessageType.NORMAL

    def append(self, text: str) -> None:
        """Append streamed text to this message in place."""
        if self.author is Author.USER:
            raise ValueError("User messages cannot be extended by streamed text.")
        self.text += text

    @property
    def is_error(self) -> bool:
        return self.message_type is MessageType.ERROR

    def to_dict(self) -> dict[str, str]:
        return {
            "author": self.author.value,
            "message_type": self.message_type.value,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Message:
        return cls(
            author=Author(payload["author"]),
            text=str(payload.get("text", "")),
            message_type=MessageType(payload.get("message_type", "Normal")),
        )


@dataclass(frozen=True)
class EditorContext:
    """Snapshot of the code surrounding the cursor in an attached editor."""

    file_path: str
    language: str
    code: str
    start_line: int | None = None
    end_line: int | None = None

    def format(self) -> str:
        """Render the context as human-readable text with a fenced code block."""
        location = f"File: {self.file_path}"
        if self.start_line is not None and self.end_line is not None:
            location += f" (lines {self.start_line}-{self.end_line})"
        elif self.start_line is not None:
            location += f" (line {self.start_line})"
        return f"{location}\n\n```{self.language}\n{self.code}\n```"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "language": self.language,
            "code": self.code,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> EditorContext:
        return cls(
            file_path=str(payload.get("file_path", "")),
            language=str(payload.get("language", "")),
            code=str(payload.get("code", "")),
            start_line=payload.get("start_line"),
            end_line=payload.get("end_line"),
        )


@dataclass(frozen=True)
class BackendResponse:
    """A streamed chunk of a reply.

    ``done`` marks the final chunk of a turn; ``context`` carries the backend's
    continuity token when the turn completes.
    """

    author: Author
    text: str
    done: bool = False
    context: str | None = None


@dataclass(frozen=True)
class BackendPrompt:
    """Text sent to the backend together with the continuity token."""

    text: str
    backend_context: str = ""


@dataclass(frozen=True)
class CopyMessages:
    """Copy the given messages to the clipboard."""

    messages: list[Message] = field(default_factory=list)


@dataclass(frozen=True)
class AcceptCodeBlock:
    """Write code back into the editor."""

    editor_context: EditorContext | None
    text: str
    accept_type: AcceptType = AcceptType.APPEND


Action = Union[CopyMessages, AcceptCodeBlock]
