"""Registry of live push-channel subscribers."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """Outbound side of a push connection.

    ``send`` must not block; it raises if the frame cannot be accepted.
    """

    def send(self, frame: str) -> None: ...


@dataclass
class Subscriber:
    """A live channel plus an optional hook run once on detach."""

    channel: Channel
    on_detach: Callable[[], None] | None = None


class SubscriberRegistry:
    """Tracks attached subscribers in registration order."""

    def __init__(self) -> None:
        self._subscribers: dict[int, Subscriber] = {}
        self._handles = itertools.count(1)

    def register(self, subscriber: Subscriber) -> int:
        """Add a subscriber and return its handle."""
        handle = next(self._handles)
        self._subscribers[handle] = subscriber
        return handle

    def deregister(self, handle: int) -> bool:
        """Remove a subscriber if present.

        Returns True if it was removed, False if it was already gone.
        """
        subscriber = self._subscribers.pop(handle, None)
        if subscriber is None:
            return False
        if subscriber.on_detach is not None:
            try:
                subscriber.on_detach()
            except Exception:
                logger.warning("Detach hook failed for subscriber %d", handle, exc_info=True)
        return True

    def for_each(self, fn: Callable[[Subscriber], None]) -> None:
        """Call ``fn`` for every subscriber registered when the pass starts.

        A subscriber whose call raises is deregistered; the rest still
        get called and nothing propagates to the caller.
        """
        for handle, subscriber in list(self._subscribers.items()):
            if handle not in self._subscribers:
                continue
            try:
                fn(subscriber)
            except Exception as e:
                logger.debug("Dropping subscriber %d: %r", handle, e)
                self.deregister(handle)

    def clear(self) -> int:
        """Deregister everything. Returns how many were removed."""
        handles = list(self._subscribers)
        for handle in handles:
            self.deregister(handle)
        return len(handles)

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, handle: object) -> bool:
        return handle in self._subscribers
