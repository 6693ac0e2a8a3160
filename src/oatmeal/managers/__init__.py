"""View and resource managers driven by the conversation state controller.

Available managers:
- BubbleList: Width-wrapped rendering of the message history
- CodeBlocks: Registry of fenced code blocks addressable by slash commands
- Scroll: Viewport position over the rendered bubbles
- ThemeManager: Theme resolution by style name and override file
"""

from __future__ import annotations

from .bubble_list import BubbleList
from .codeblocks import CodeBlock, CodeBlocks, split_message
from .scroll import Scroll
from .theme import DEFAULT_THEME_NAME, Theme, ThemeManager

__all__ = [
    "BubbleList",
    "CodeBlock",
    "CodeBlocks",
    "DEFAULT_THEME_NAME",
    "Scroll",
    "Theme",
    "ThemeManager",
    "split_message",
]
