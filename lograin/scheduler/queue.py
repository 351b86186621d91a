"""Bounded FIFO of pending events.

The queue owns overflow detection: when an enqueue brings the length up to
capacity, the overflow callback runs before `enqueue` returns, so callers
never observe a queue at or above capacity.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterator

from lograin.core.types import Event


class EventQueue:
    def __init__(self, capacity: int = 500, *, on_overflow: Callable[["EventQueue"], None] | None = None):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: deque[Event] = deque()
        self._on_overflow = on_overflow
        self.overflows = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def set_overflow_handler(self, handler: Callable[["EventQueue"], None] | None) -> None:
        self._on_overflow = handler

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._items)

    def enqueue(self, event: Event) -> bool:
        """Append an event; returns True when this call triggered an overflow."""

        self._items.append(event)
        if len(self._items) < self._capacity:
            return False

        self.overflows += 1
        if self._on_overflow is not None:
            self._on_overflow(self)
        # The handler is expected to clear; the bound holds either way.
        if len(self._items) >= self._capacity:
            self._items.clear()
        return True

    def popleft(self) -> Event:
        return self._items.popleft()

    def clear(self) -> int:
        dropped = len(self._items)
        self._items.clear()
        return dropped
