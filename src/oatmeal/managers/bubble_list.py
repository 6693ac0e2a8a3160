"""Width-wrapped bubble layout of the message history, rendered with rich."""

from __future__ import annotations

from collections.abc import Sequence
import io
import logging

from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.segment import Segment
from rich.syntax import Syntax
from rich.text import Text

from ..models import Author, Message
from .codeblocks import has_code_blocks, split_message
from .theme import Theme

LOGGER = logging.getLogger(__name__)

# Share of the viewport a bubble may occupy.
BUBBLE_WIDTH_RATIO = 0.8
MIN_BUBBLE_WIDTH = 20

Line = list[Segment]
_CacheKey = tuple[Author, str, str, int, int]


class BubbleList:
    """Render messages into lines of segments for a given viewport width."""

    def __init__(self, theme: Theme) -> None:
        self.theme = theme
        self._lines: list[Line] = []
        self._cache: dict[_CacheKey, list[Line]] = {}

    @property
    def lines(self) -> list[Line]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def plain_lines(self) -> list[str]:
        """Return the rendered lines without styling."""
        return ["".join(segment.text for segment in line) for line in self._lines]

    def set_messages(self, messages: Sequence[Message], width: int) -> None:
        """Re-render the layout, reusing cached bubbles that did not change."""
        if width <= 0:
            self._lines = []
            return

        console = Console(
            width=width,
            file=io.StringIO(),
            force_terminal=True,
            color_system="truecolor",
        )
        cache: dict[_CacheKey, list[Line]] = {}
        lines: list[Line] = []
        block_number = 0
        for message in messages:
            key: _CacheKey = (
                message.author,
                message.message_type.value,
                message.text,
                width,
                block_number,
            )
            rendered = self._cache.get(key)
            if rendered is None:
                rendered = console.render_lines(
                    self._bubble(message, width, block_number),
                    pad=False,
                )
            cache[key] = rendered
            lines.extend(rendered)
            if has_code_blocks(message):
                block_number += sum(
                    1 for _, lang in split_message(message.text) if lang is not None
                )

        self._cache = cache
        self._lines = lines

    def _bubble(self, message: Message, width: int, first_block: int) -> RenderableType:
        parts: list[RenderableType] = []
        block_number = first_block
        segments = split_message(message.text) if has_code_blocks(message) else []
        if not segments:
            parts.append(Text(message.text.strip("\n")))
        for content, lang in segments:
            if lang is None:
                parts.append(Text(content.strip("\n")))
                continue
            block_number += 1
            parts.append(Text(f"({block_number})", style="dim"))
            parts.append(
                Syntax(
                    content,
                    lang or "text",
                    theme=self.theme.syntax,
                    line_numbers=False,
                    word_wrap=True,
                )
            )

        panel = Panel(
            Group(*parts),
            title=message.author.value,
            title_align="left",
            border_style=self.theme.color_for(message),
            expand=False,
        )
        bubble_width = min(width, max(MIN_BUBBLE_WIDTH, int(width * BUBBLE_WIDTH_RATIO)))
        align = "right" if message.author is Author.USER else "left"
        return Align(panel, align=align, width=bubble_width)
