"""Server-Sent Events framing and the per-connection queue channel."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

from panelhub.events import EventRecord

# Frames buffered per connection before the subscriber counts as too slow.
DEFAULT_CHANNEL_SIZE = 256


class ChannelClosedError(RuntimeError):
    """Raised when sending on a closed channel."""


class ChannelFullError(RuntimeError):
    """Raised when a channel's buffer is full (slow consumer)."""


def format_frame(record: EventRecord) -> str:
    """Encode a record as one ``data:`` frame."""
    payload = json.dumps(record.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return f"data: {payload}\n\n"


def format_comment(text: str = "") -> str:
    return f": {text}\n\n"


class QueueChannel:
    """Buffers frames for one streaming connection.

    The hub calls ``send`` synchronously; the response coroutine drains
    ``frames()``. Closing lets already-queued frames drain, then ends the
    iterator.
    """

    def __init__(self, maxsize: int = DEFAULT_CHANNEL_SIZE) -> None:
        # Unbounded so the end marker always fits; the limit applies to send()
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._maxsize = maxsize
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: str) -> None:
        if self._closed:
            raise ChannelClosedError("Channel is closed")
        if self._queue.qsize() >= self._maxsize:
            raise ChannelFullError("Channel buffer is full")
        self._queue.put_nowait(frame)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def frames(self) -> AsyncIterator[str]:
        """Yield queued frames until the channel is closed."""
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame
