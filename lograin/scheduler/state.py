from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from lograin.core.types import Drop, Viewport
from lograin.scheduler.queue import EventQueue


@dataclass(slots=True)
class Metrics:
    """Throughput counters and sliding timestamp windows (milliseconds)."""

    total_received: int = 0
    total_placed: int = 0
    total_lost: int = 0
    arrivals: deque[int] = field(default_factory=deque)
    placements: deque[int] = field(default_factory=deque)
    last_queue_size: int = 0


@dataclass(slots=True)
class RateState:
    period_ms: int


class LaneGrid:
    """The lanes of the display, each holding its active drops."""

    def __init__(self, count: int = 0):
        self._lanes: list[list[Drop]] = [[] for _ in range(max(0, count))]

    def __len__(self) -> int:
        return len(self._lanes)

    def __getitem__(self, index: int) -> list[Drop]:
        return self._lanes[index]

    def __iter__(self) -> Iterator[list[Drop]]:
        return iter(self._lanes)

    def resize(self, count: int) -> None:
        """Grow or shrink to `count` lanes.

        Surviving lanes keep their drop lists untouched; lanes past the new
        count are discarded together with their drops.
        """

        count = max(0, count)
        if count > len(self._lanes):
            self._lanes.extend([] for _ in range(count - len(self._lanes)))
        elif count < len(self._lanes):
            del self._lanes[count:]

    def empty_lanes(self) -> list[int]:
        return [i for i, drops in enumerate(self._lanes) if not drops]

    def active_drops(self) -> int:
        return sum(len(drops) for drops in self._lanes)


@dataclass(slots=True)
class SchedulerState:
    """Everything the scheduler mutates, passed explicitly to each component."""

    queue: EventQueue
    lanes: LaneGrid
    metrics: Metrics
    rate: RateState
    viewport: Viewport
    lane_width: int
    multi_capable: list[int] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        *,
        width: int,
        height: int,
        lane_width: int,
        queue_capacity: int = 500,
        period_ms: int = 30,
    ) -> "SchedulerState":
        if lane_width <= 0:
            raise ValueError(f"lane_width must be positive, got {lane_width}")
        return cls(
            queue=EventQueue(queue_capacity),
            lanes=LaneGrid(width // lane_width),
            metrics=Metrics(),
            rate=RateState(period_ms=period_ms),
            viewport=Viewport(width=width, height=height),
            lane_width=lane_width,
        )

    def resize(self, width: int, height: int) -> int:
        """Apply a new viewport size; returns the new lane count."""

        self.viewport.width = width
        self.viewport.height = height
        self.lanes.resize(width // self.lane_width)
        self.multi_capable = [i for i in self.multi_capable if i < len(self.lanes)]
        return len(self.lanes)
