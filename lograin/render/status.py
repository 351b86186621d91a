from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from lograin.core.clock import Clock
from lograin.core.types import ConnectionState
from lograin.scheduler.load import LoadMonitor
from lograin.scheduler.state import SchedulerState


logger = logging.getLogger(__name__)


StatusSink = Callable[[Sequence[str]], None]


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    queue_size: int
    queue_trend: str  # "empty" | "rising" | "falling" | "steady" | "cleared"
    messages_per_second: float
    placements_per_second: float
    total_received: int
    total_placed: int
    total_lost: int
    period_ms: int
    connection: str

    @property
    def fps(self) -> int:
        # Half up, like compute_interval.
        return int(1000 / self.period_ms + 0.5)

    def lines(self) -> list[str]:
        queue = "Cleared" if self.queue_trend == "cleared" else f"{self.queue_size} queued"
        return [
            self.connection,
            f"{self.messages_per_second:.1f} msgs/s",
            queue,
            f"{self.placements_per_second:.1f} drops/s",
            f"{self.total_received:,} received",
            f"{self.total_placed:,} drops",
            f"{self.total_lost:,} lost",
            f"{self.fps} FPS ({self.period_ms}ms)",
        ]


def queue_trend(current: int, previous: int) -> str:
    if current == 0:
        return "empty"
    if current > previous:
        return "rising"
    if current < previous:
        return "falling"
    return "steady"


class StatusBoard:
    """Aggregate display statistics, refreshed on their own one-second cadence.

    After an overflow the queue field reads "Cleared" for a fixed window;
    when the window ends the trend restarts from an empty queue.
    """

    def __init__(
        self,
        state: SchedulerState,
        load: LoadMonitor,
        *,
        clock: Clock,
        cleared_ms: int = 1500,
        sink: StatusSink | None = None,
    ):
        self._state = state
        self._load = load
        self._clock = clock
        self._cleared_ms = cleared_ms
        self._sink = sink
        self._cleared_until: int | None = None
        self.connection = ConnectionState.CONNECTING
        self.last: StatusSnapshot | None = None

    @property
    def cleared(self) -> bool:
        return self._cleared_until is not None and self._clock() < self._cleared_until

    def mark_cleared(self) -> None:
        self._cleared_until = self._clock() + self._cleared_ms
        self.refresh()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        # Resume the normal display on time even if no stats refresh lands then.
        loop.call_later(self._cleared_ms / 1000.0, self.refresh)

    def set_connection(self, connection: ConnectionState) -> None:
        self.connection = connection
        self.refresh()

    def refresh(self) -> StatusSnapshot:
        metrics = self._state.metrics
        size = len(self._state.queue)

        if self._cleared_until is not None and self._clock() < self._cleared_until:
            trend = "cleared"
        else:
            if self._cleared_until is not None:
                self._cleared_until = None
                metrics.last_queue_size = 0
            trend = queue_trend(size, metrics.last_queue_size)
            metrics.last_queue_size = size

        snapshot = StatusSnapshot(
            queue_size=size,
            queue_trend=trend,
            messages_per_second=round(self._load.messages_per_second(), 1),
            placements_per_second=round(self._load.placements_per_second(), 1),
            total_received=metrics.total_received,
            total_placed=metrics.total_placed,
            total_lost=metrics.total_lost,
            period_ms=self._state.rate.period_ms,
            connection=self.connection.value,
        )
        self.last = snapshot
        if self._sink is not None:
            self._sink(snapshot.lines())
        return snapshot
