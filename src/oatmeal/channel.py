"""Unbounded, order-preserving channel between the controller and its consumers."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
import logging
from typing import Generic, TypeVar

from .exceptions import ChannelClosedError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_CLOSED = object()


class Channel(Generic[T]):
    """FIFO queue with explicit close semantics.

    ``send`` never blocks. After ``close`` any further ``send`` raises
    ``ChannelClosedError``; receivers drain what was queued and then get
    ``None``.
    """

    def __init__(self, name: str = "channel") -> None:
        self.name = name
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        """Enqueue an item without waiting."""
        if self._closed:
            LOGGER.error(
                "channel.send.closed",
                extra={"event": "channel.send.closed", "channel": self.name},
            )
            raise ChannelClosedError(f"Channel {self.name!r} is closed.")
        self._queue.put_nowait(item)

    def close(self) -> None:
        """Stop accepting items and wake up any waiting receiver."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def recv(self) -> T | None:
        """Return the next item, or ``None`` once closed and drained."""
        item = await self._queue.get()
        if item is _CLOSED:
            # Leave the sentinel for any other receiver.
            self._queue.put_nowait(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def try_recv(self) -> T | None:
        """Return the next queued item without waiting, or ``None``."""
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            item = await self.recv()
            if item is None:
                return
            yield item
