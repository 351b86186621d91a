from __future__ import annotations

import logging
import math
from typing import Protocol

from lograin.scheduler.state import SchedulerState


logger = logging.getLogger(__name__)


class Reschedulable(Protocol):
    def reschedule(self, period_ms: int) -> None: ...


def compute_interval(
    queue_length: int,
    *,
    default_ms: int = 30,
    min_ms: int = 10,
    slow_threshold: int = 100,
    fast_threshold: int = 400,
) -> int:
    """Render-tick period for a queue length.

    Flat at `default_ms` up to `slow_threshold`, flat at `min_ms` from
    `fast_threshold`, linear in between (rounded half up).
    """

    if queue_length <= slow_threshold:
        return default_ms
    if queue_length >= fast_threshold:
        return min_ms

    progress = (queue_length - slow_threshold) / (fast_threshold - slow_threshold)
    return int(math.floor(default_ms - progress * (default_ms - min_ms) + 0.5))


class RateController:
    """Keeps the render tick period in step with the queue backlog."""

    def __init__(
        self,
        state: SchedulerState,
        *,
        ticker: Reschedulable | None = None,
        default_ms: int = 30,
        min_ms: int = 10,
        slow_threshold: int = 100,
        fast_threshold: int = 400,
    ):
        self._state = state
        self._ticker = ticker
        self._default_ms = default_ms
        self._min_ms = min_ms
        self._slow = slow_threshold
        self._fast = fast_threshold

    def bind(self, ticker: Reschedulable) -> None:
        self._ticker = ticker

    def interval_for(self, queue_length: int) -> int:
        return compute_interval(
            queue_length,
            default_ms=self._default_ms,
            min_ms=self._min_ms,
            slow_threshold=self._slow,
            fast_threshold=self._fast,
        )

    def update(self) -> bool:
        """Recompute the period; returns True when the tick was rescheduled."""

        queue_length = len(self._state.queue)
        period = self.interval_for(queue_length)
        if period == self._state.rate.period_ms:
            return False

        old = self._state.rate.period_ms
        self._state.rate.period_ms = period
        if self._ticker is not None:
            self._ticker.reschedule(period)
        logger.debug("tick_period_changed", extra={"old_ms": old, "new_ms": period, "queue": queue_length})
        return True
