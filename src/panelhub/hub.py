"""Broadcast hub: publish, subscribe and snapshot in one place."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from panelhub.events import VALID_ROLES, EventRecord, now_iso, validate_event
from panelhub.history import DEFAULT_CAPACITY, HistoryRing
from panelhub.registry import Channel, Subscriber, SubscriberRegistry
from panelhub.sse import format_frame

logger = logging.getLogger(__name__)


class HubStoppedError(RuntimeError):
    """Raised when attaching to a hub that is not running."""


@dataclass(frozen=True)
class HubSnapshot:
    """Point-in-time view of retained history and external state."""

    history: list[EventRecord] = field(default_factory=list)
    external_state: str = ""

    def to_dict(self) -> dict:
        return {
            "hostInfo": self.external_state,
            "history": [r.to_dict() for r in self.history],
        }


class BroadcastHub:
    """Owns the history ring, the subscriber registry and external state.

    All operations are synchronous and never await, so on a single event
    loop each one runs to completion before any other starts.

    Usage::

        hub = BroadcastHub(capacity=50)
        hub.start()
        handle = hub.attach(channel, on_detach=channel.close)
        hub.publish("user", "hello")
        hub.detach(handle)
        hub.stop()
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        roles: frozenset[str] | set[str] | None = VALID_ROLES,
    ) -> None:
        self._history = HistoryRing(capacity)
        self._registry = SubscriberRegistry()
        # None leaves roles open: any non-empty tag is accepted
        self._roles = frozenset(roles) if roles is not None else None
        self._ids = itertools.count(1)
        self._external_state = ""
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def capacity(self) -> int:
        return self._history.capacity

    @property
    def subscriber_count(self) -> int:
        return len(self._registry)

    @property
    def history_size(self) -> int:
        return len(self._history)

    def start(self) -> None:
        """Accept subscribers."""
        self._running = True

    def stop(self) -> None:
        """Detach every subscriber and refuse new ones until restarted."""
        self._running = False
        dropped = self._registry.clear()
        if dropped:
            logger.info("Hub stopped, detached %d subscriber(s)", dropped)

    def publish(self, role: str, text: str) -> EventRecord:
        """Record an event and fan it out to current subscribers.

        Delivery is fire-and-forget: a subscriber that cannot take the
        frame is dropped, never waited on.
        """
        validate_event(role, text, self._roles)
        record = EventRecord(
            id=next(self._ids),
            timestamp=now_iso(),
            role=role,
            text=text,
        )
        self._history.append(record)
        if len(self._registry):
            frame = format_frame(record)
            self._registry.for_each(lambda sub: sub.channel.send(frame))
        return record

    def attach(
        self,
        channel: Channel,
        on_detach: Callable[[], None] | None = None,
    ) -> int:
        """Register a channel for events published from now on.

        History is not replayed here; new clients catch up through
        ``get_snapshot``.
        """
        if not self._running:
            raise HubStoppedError("Broadcast hub is not running")
        handle = self._registry.register(Subscriber(channel=channel, on_detach=on_detach))
        logger.debug("Subscriber %d attached (%d total)", handle, len(self._registry))
        return handle

    def detach(self, handle: int) -> None:
        """Deregister a subscriber. Safe to call more than once."""
        if self._registry.deregister(handle):
            logger.debug("Subscriber %d detached (%d left)", handle, len(self._registry))

    def is_attached(self, handle: int) -> bool:
        return handle in self._registry

    def set_external_state(self, value: str | None) -> None:
        """Replace the last-known host state."""
        self._external_state = value or ""

    def get_snapshot(self) -> HubSnapshot:
        return HubSnapshot(
            history=self._history.snapshot(),
            external_state=self._external_state,
        )
