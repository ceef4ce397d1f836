"""Bounded most-recent-first retention of published events."""

from __future__ import annotations

from collections import deque

from panelhub.events import EventRecord

DEFAULT_CAPACITY = 50


class HistoryRing:
    """Keeps the newest ``capacity`` records, newest first.

    Appending at capacity evicts the oldest record.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self._records: deque[EventRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._records.maxlen

    def append(self, record: EventRecord) -> None:
        """Insert at the front, dropping the tail when full."""
        self._records.appendleft(record)

    def snapshot(self) -> list[EventRecord]:
        """Return a copy of the retained records, most recent first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
