from __future__ import annotations

import math

from lograin.scheduler.state import Metrics


def multi_lane_count(messages_per_second: float, *, floor_mps: float = 20.0, mps_per_lane: float = 2.0) -> int:
    """Number of lanes allowed a second concurrent drop at this arrival rate.

    Nothing below `floor_mps`; above it, one extra lane per `mps_per_lane`.
    """

    return max(0, math.floor((messages_per_second - floor_mps) / mps_per_lane))


class LoadMonitor:
    """Sliding-window arrival and placement rates."""

    def __init__(
        self,
        metrics: Metrics,
        *,
        window_ms: int = 10_000,
        floor_mps: float = 20.0,
        mps_per_lane: float = 2.0,
    ):
        self._metrics = metrics
        self._window_ms = window_ms
        self._floor_mps = floor_mps
        self._mps_per_lane = mps_per_lane

    @property
    def window_s(self) -> float:
        return self._window_ms / 1000.0

    def record_arrival(self, now_ms: int) -> None:
        self._metrics.arrivals.append(now_ms)

    def record_placement(self, now_ms: int) -> None:
        self._metrics.placements.append(now_ms)

    def prune(self, now_ms: int) -> None:
        # Timestamps come from a monotonic clock, so both windows are sorted.
        cutoff = now_ms - self._window_ms
        for window in (self._metrics.arrivals, self._metrics.placements):
            while window and window[0] < cutoff:
                window.popleft()

    def messages_per_second(self) -> float:
        return len(self._metrics.arrivals) / self.window_s

    def placements_per_second(self) -> float:
        return len(self._metrics.placements) / self.window_s

    def multi_lane_count(self) -> int:
        return multi_lane_count(
            self.messages_per_second(),
            floor_mps=self._floor_mps,
            mps_per_lane=self._mps_per_lane,
        )
