from __future__ import annotations

import random
from typing import Sequence

from lograin.config.model import SeverityStyle
from lograin.core.types import Drop
from lograin.scheduler.load import LoadMonitor
from lograin.scheduler.state import SchedulerState


def sample_without_replacement(n: int, k: int, rng: random.Random) -> list[int]:
    """Pick `k` distinct indices from range(n), uniformly, in random order.

    Partial Fisher-Yates: only the first k positions of the index pool are
    shuffled.
    """

    k = max(0, min(k, n))
    pool = list(range(n))
    for i in range(k):
        j = rng.randrange(i, n)
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:k]


def can_take_second_drop(drops: Sequence[Drop], viewport_height: int) -> bool:
    """A lane takes a second drop once its single message drop is a third of the way down."""

    if len(drops) != 1:
        return False
    first = drops[0]
    return first.is_message and first.pixel_y > viewport_height / 3


class LaneAllocator:
    """Moves queued events into lanes, oldest first."""

    def __init__(
        self,
        state: SchedulerState,
        load: LoadMonitor,
        style: SeverityStyle,
        *,
        rng: random.Random,
        highlight_second_drop: bool = False,
    ):
        self._state = state
        self._load = load
        self._style = style
        self._rng = rng
        self._highlight_second = highlight_second_drop

    def select_multi_capable(self, count: int) -> list[int]:
        chosen = sample_without_replacement(len(self._state.lanes), count, self._rng)
        self._state.multi_capable = chosen
        return chosen

    def drain(self, now_ms: int, *, multi_capable: Sequence[int] | None = None) -> int:
        """Place as many queued events as the lanes allow this tick.

        Multi-capable lanes are drawn fresh on every call unless given
        explicitly. Returns the number of events placed; whatever does not
        fit stays queued for the next tick.
        """

        if multi_capable is None:
            self.select_multi_capable(self._load.multi_lane_count())
        else:
            self._state.multi_capable = [i for i in multi_capable if 0 <= i < len(self._state.lanes)]

        placed = 0
        while self._state.queue:
            target = self._find_lane()
            if target is None:
                break
            lane_index, is_second = target
            self._place(lane_index, is_second, now_ms)
            placed += 1
        return placed

    def _find_lane(self) -> tuple[int, bool] | None:
        lanes = self._state.lanes
        height = self._state.viewport.height
        for lane_index in self._state.multi_capable:
            if can_take_second_drop(lanes[lane_index], height):
                return lane_index, True

        empty = lanes.empty_lanes()
        if empty:
            return empty[self._rng.randrange(len(empty))], False
        return None

    def _place(self, lane_index: int, is_second: bool, now_ms: int) -> None:
        event = self._state.queue.popleft()
        color = self._style.second_drop_color if is_second and self._highlight_second else None
        self._state.lanes[lane_index].append(Drop.from_event(event, color=color))
        self._load.record_placement(now_ms)
        self._state.metrics.total_placed += 1
