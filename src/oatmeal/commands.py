"""Pure parsing helpers for slash commands typed into the chat input."""

from __future__ import annotations

from dataclasses import dataclass, field

_HELP = ("/help", "/h")
_QUIT = ("/quit", "/q", "/exit")
_MODEL = ("/model", "/m")
_MODEL_LIST = ("/modellist", "/ml")
_APPEND = ("/append", "/a")
_REPLACE = ("/replace", "/r")
_COPY = ("/copy", "/c")
_NEW = ("/new", "/n")

_KNOWN_COMMANDS = frozenset(
    _HELP + _QUIT + _MODEL + _MODEL_LIST + _APPEND + _REPLACE + _COPY + _NEW
)

_HELP_ROWS: tuple[tuple[str, str], ...] = (
    ("/help (/h)", "Show this help text."),
    ("/quit (/q, /exit)", "Exit Oatmeal."),
    ("/model (/m) NAME", "Switch to model NAME."),
    ("/modellist (/ml)", "List the models available on the backend."),
    ("/append (/a) [N...]", "Append code blocks to the editor. Accepts N, N..M or N,M."),
    ("/replace (/r) [N...]", "Replace the editor selection with code blocks."),
    ("/copy (/c) [N...]", "Copy code blocks, or the whole chat without arguments."),
    ("/new (/n) [clear]", "Start a new session; clear also drops editor context."),
)


@dataclass(frozen=True)
class SlashCommand:
    """A parsed slash command and its whitespace-separated arguments."""

    command: str
    args: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> SlashCommand | None:
        """Parse an input line, returning ``None`` for ordinary chat text."""
        parts = text.strip().split()
        if not parts:
            return None
        command = parts[0].lower()
        if command not in _KNOWN_COMMANDS:
            return None
        return cls(command=command, args=parts[1:])

    @staticmethod
    def help_text() -> str:
        """Return a markdown table describing every command."""
        lines = ["| Command | Description |", "| --- | --- |"]
        lines.extend(f"| `{usage}` | {description} |" for usage, description in _HELP_ROWS)
        return "\n".join(lines)

    def is_help(self) -> bool:
        return self.command in _HELP

    def is_quit(self) -> bool:
        return self.command in _QUIT

    def is_model_set(self) -> bool:
        return self.command in _MODEL and bool(self.args)

    def is_model_list(self) -> bool:
        return self.command in _MODEL_LIST

    def is_append_code_block(self) -> bool:
        return self.command in _APPEND

    def is_replace_code_block(self) -> bool:
        return self.command in _REPLACE

    def is_copy_code_block(self) -> bool:
        return self.command in _COPY and bool(self.args)

    def is_copy_chat(self) -> bool:
        return self.command in _COPY and not self.args

    def is_new(self) -> bool:
        return self.command in _NEW
