"""Registry of fenced code blocks found in the conversation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import re
from typing import TYPE_CHECKING

from ..exceptions import CodeBlockSelectionError
from ..models import Author, Message

if TYPE_CHECKING:
    from ..commands import SlashCommand

LOGGER = logging.getLogger(__name__)

_FENCE_RE = re.compile(
    r"```(?P<lang>[^\n`]*)\n(?P<code>.*?)```",
    re.DOTALL,
)
_RANGE_RE = re.compile(r"^(?P<start>\d+)\.\.(?P<end>\d+)$")


def split_message(text: str) -> list[tuple[str, str | None]]:
    """Split *text* into alternating prose and code-block segments.

    Returns a list of ``(content, lang)`` tuples where ``lang`` is ``None``
    for prose segments and the fence language string (possibly empty) for
    code blocks.
    """
    segments: list[tuple[str, str | None]] = []
    cursor = 0
    for match in _FENCE_RE.finditer(text):
        start, end = match.span()
        if start > cursor:
            prose = text[cursor:start]
            if prose.strip():
                segments.append((prose, None))
        lang = match.group("lang").strip()
        code = match.group("code")
        if code.endswith("\n"):
            code = code[:-1]
        segments.append((code, lang))
        cursor = end
    tail = text[cursor:]
    if tail.strip():
        segments.append((tail, None))
    return segments


def has_code_blocks(message: Message) -> bool:
    """Return whether *message* contributes blocks to the registry."""
    return message.author is not Author.USER and "```" in message.text


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code segment addressable by its 1-based index."""

    index: int
    language: str
    code: str
    message_index: int


class CodeBlocks:
    """Number the code blocks of non-user messages in history order."""

    def __init__(self) -> None:
        self._blocks: list[CodeBlock] = []

    @property
    def blocks(self) -> list[CodeBlock]:
        return list(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def replace_from_messages(self, messages: Iterable[Message]) -> None:
        """Rebuild the registry from the complete message history."""
        blocks: list[CodeBlock] = []
        for message_index, message in enumerate(messages):
            if not has_code_blocks(message):
                continue
            for content, lang in split_message(message.text):
                if lang is None:
                    continue
                blocks.append(
                    CodeBlock(
                        index=len(blocks) + 1,
                        language=lang,
                        code=content,
                        message_index=message_index,
                    )
                )
        self._blocks = blocks
        LOGGER.debug(
            "codeblocks.replaced",
            extra={"event": "codeblocks.replaced", "count": len(blocks)},
        )

    def blocks_from_slash_commands(self, command: SlashCommand) -> str:
        """Resolve the blocks referenced by a command's arguments into one string.

        Without arguments the most recent block is selected. Each argument is
        an index ``N`` or an inclusive range ``N..M``; commas separate several
        selections inside one argument.
        """
        if not self._blocks:
            raise CodeBlockSelectionError("There are no code blocks to select from.")

        if not command.args:
            return self._blocks[-1].code

        selected: list[str] = []
        for raw in command.args:
            for part in raw.split(","):
                part = part.strip()
                if not part:
                    continue
                for index in self._parse_selection(part):
                    selected.append(self._blocks[index - 1].code)

        if not selected:
            raise CodeBlockSelectionError("No code blocks were selected.")
        return "\n".join(selected)

    def _parse_selection(self, part: str) -> range:
        range_match = _RANGE_RE.match(part)
        if range_match:
            start = int(range_match.group("start"))
            end = int(range_match.group("end"))
            if start > end:
                raise CodeBlockSelectionError(
                    f"Code block range {part} must go from low to high."
                )
        elif part.isdigit():
            start = end = int(part)
        else:
            raise CodeBlockSelectionError(f"Code block {part!r} is not a number.")

        for index in (start, end):
            if index < 1 or index > len(self._blocks):
                raise CodeBlockSelectionError(
                    f"Code block {index} does not exist. "
                    f"Valid blocks are 1 to {len(self._blocks)}."
                )
        return range(start, end + 1)
