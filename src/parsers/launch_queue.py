"""Bounded in-memory queue of launches waiting for mint lookup.

Drop-oldest on overflow: when full, the head (longest waiting) event is
evicted before the new one is appended. Evictions are counted so the
pipeline can report loss. No locking: the queue lives on a single event
loop and both operations are O(1) without awaiting.
"""

from collections import deque

from loguru import logger

from src.parsers.launch_types import PendingEvent, PipelineConfigError


class LaunchQueue:
    """Fixed-capacity FIFO of PendingEvent with drop-oldest overflow."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise PipelineConfigError(f"Queue capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._items: deque[PendingEvent] = deque()
        self._dropped = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def dropped(self) -> int:
        """Events evicted due to overflow since creation."""
        return self._dropped

    def __len__(self) -> int:
        return len(self._items)

    def push(self, event: PendingEvent) -> PendingEvent | None:
        """Append event at the tail. Returns the evicted head event, if any."""
        evicted: PendingEvent | None = None
        if len(self._items) >= self._capacity:
            evicted = self._items.popleft()
            self._dropped += 1
            logger.debug(
                f"[QUEUE] Full ({self._capacity}), dropped {evicted.signature[:12]}"
            )
        self._items.append(event)
        return evicted

    def pop(self) -> PendingEvent | None:
        """Remove and return the head event, or None when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def snapshot(self) -> list[PendingEvent]:
        """Current contents in FIFO order (copy)."""
        return list(self._items)
