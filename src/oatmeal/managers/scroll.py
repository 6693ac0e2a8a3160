"""Viewport scroll position over the rendered bubble list."""

from __future__ import annotations


class Scroll:
    """Track a line offset clamped to the scrollable range."""

    def __init__(self) -> None:
        self.position = 0
        self.content_length = 0
        self.viewport_height = 0

    @property
    def max_position(self) -> int:
        return max(0, self.content_length - self.viewport_height)

    @property
    def at_bottom(self) -> bool:
        return self.position >= self.max_position

    def set_state(self, content_length: int, viewport_height: int) -> None:
        """Update the bounds and clamp the current position into them."""
        self.content_length = max(0, content_length)
        self.viewport_height = max(0, viewport_height)
        self.position = min(self.position, self.max_position)

    def first(self) -> None:
        self.position = 0

    def last(self) -> None:
        self.position = self.max_position

    def up(self, amount: int = 1) -> None:
        self.position = max(0, self.position - amount)

    def down(self, amount: int = 1) -> None:
        self.position = min(self.max_position, self.position + amount)

    def up_page(self) -> None:
        self.up(max(1, self.viewport_height))

    def down_page(self) -> None:
        self.down(max(1, self.viewport_height))
