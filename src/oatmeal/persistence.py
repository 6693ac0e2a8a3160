"""Session persistence: one JSON document per session id."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
import json
import logging
import os
from pathlib import Path
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError

from .exceptions import SessionFormatError, SessionNotFoundError, StoreError
from .models import Author, EditorContext, Message, MessageType

LOGGER = logging.getLogger(__name__)


class MessageRecord(BaseModel):
    """On-disk shape of a message."""

    author: Author
    message_type: MessageType = MessageType.NORMAL
    text: str = ""


class EditorContextRecord(BaseModel):
    """On-disk shape of an editor context snapshot."""

    file_path: str = ""
    language: str = ""
    code: str = ""
    start_line: int | None = None
    end_line: int | None = None


class SessionStateRecord(BaseModel):
    backend_context: str = ""
    editor_context: EditorContextRecord | None = None
    messages: list[MessageRecord] = Field(default_factory=list)


class SessionRecord(BaseModel):
    """Top-level persisted session document."""

    id: str
    timestamp: str
    state: SessionStateRecord = Field(default_factory=SessionStateRecord)


@dataclass
class Session:
    """A session restored from storage."""

    id: str
    timestamp: str
    backend_context: str
    editor_context: EditorContext | None
    messages: list[Message]

    @classmethod
    def from_record(cls, record: SessionRecord) -> Session:
        editor_context = None
        if record.state.editor_context is not None:
            editor_context = EditorContext.from_dict(
                record.state.editor_context.model_dump()
            )
        return cls(
            id=record.id,
            timestamp=record.timestamp,
            backend_context=record.state.backend_context,
            editor_context=editor_context,
            messages=[Message.from_dict(item.model_dump()) for item in record.state.messages],
        )


class SessionStore:
    """Load and save sessions under a private directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    @staticmethod
    def create_id() -> str:
        """Return a fresh unique session identifier."""
        return str(uuid4())

    def _enforce_permissions(self, path: Path, mode: int = 0o600) -> None:
        """Best-effort POSIX permissions on a file or directory."""
        if os.name != "posix":
            return
        try:
            path.chmod(mode)
        except OSError as exc:
            LOGGER.warning("Unable to enforce %o permissions for %s: %s", mode, path, exc)

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._enforce_permissions(self.directory, 0o700)

    def _session_path(self, session_id: str) -> Path:
        normalized = session_id.strip()
        if not normalized or Path(normalized).name != normalized or normalized in {".", ".."}:
            raise SessionNotFoundError(f"Session id {session_id!r} is not valid.")
        return self.directory / f"{normalized}.json"

    def load(self, session_id: str) -> Session:
        """Load a session, raising ``SessionNotFoundError`` when it does not exist."""
        path = self._session_path(session_id)
        if not path.is_file():
            raise SessionNotFoundError(f"Session {session_id} does not exist.")
        return Session.from_record(self._read_record(path))

    def _read_record(self, path: Path) -> SessionRecord:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Unable to read session file {path}: {exc}") from exc
        try:
            return SessionRecord.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise SessionFormatError(f"Session file {path} is invalid: {exc}") from exc

    def save(
        self,
        session_id: str,
        backend_context: str,
        editor_context: EditorContext | None,
        messages: list[Message],
    ) -> Path:
        """Write the session snapshot, replacing any previous one with the same id."""
        target = self._session_path(session_id)
        record = SessionRecord(
            id=session_id,
            timestamp=datetime.now(UTC).isoformat(),
            state=SessionStateRecord(
                backend_context=backend_context,
                editor_context=(
                    EditorContextRecord(**editor_context.to_dict())
                    if editor_context is not None
                    else None
                ),
                messages=[MessageRecord(**message.to_dict()) for message in messages],
            ),
        )
        try:
            self._ensure_directory()
            target.write_text(
                json.dumps(record.model_dump(mode="json"), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StoreError(f"Unable to write session file {target}: {exc}") from exc
        self._enforce_permissions(target)
        LOGGER.info(
            "sessions.saved",
            extra={
                "event": "sessions.saved",
                "session_id": session_id,
                "messages": len(messages),
            },
        )
        return target

    def list_sessions(self) -> list[Session]:
        """List stored sessions, newest first, skipping unreadable files."""
        if not self.directory.is_dir():
            return []
        sessions: list[Session] = []
        for path in self.directory.glob("*.json"):
            try:
                sessions.append(Session.from_record(self._read_record(path)))
            except StoreError as exc:
                LOGGER.warning(
                    "sessions.list.skipped",
                    extra={"event": "sessions.list.skipped", "path": str(path), "reason": str(exc)},
                )
        return sorted(sessions, key=lambda item: item.timestamp, reverse=True)

    def delete(self, session_id: str) -> None:
        """Remove one session."""
        path = self._session_path(session_id)
        if not path.is_file():
            raise SessionNotFoundError(f"Session {session_id} does not exist.")
        try:
            path.unlink()
        except OSError as exc:
            raise StoreError(f"Unable to delete session file {path}: {exc}") from exc
        LOGGER.info(
            "sessions.deleted",
            extra={"event": "sessions.deleted", "session_id": session_id},
        )

    def delete_all(self) -> int:
        """Remove every stored session and return how many were deleted."""
        if not self.directory.is_dir():
            return 0
        deleted = 0
        for path in self.directory.glob("*.json"):
            try:
                path.unlink()
            except OSError as exc:
                raise StoreError(f"Unable to delete session file {path}: {exc}") from exc
            deleted += 1
        LOGGER.info(
            "sessions.deleted_all",
            extra={"event": "sessions.deleted_all", "count": deleted},
        )
        return deleted
