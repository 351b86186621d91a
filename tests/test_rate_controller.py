from __future__ import annotations

from lograin.config.model import SeverityStyle
from lograin.scheduler.intake import make_event
from lograin.scheduler.rate import RateController, compute_interval
from lograin.scheduler.state import SchedulerState


class RecordingTicker:
    def __init__(self) -> None:
        self.periods: list[int] = []

    def reschedule(self, period_ms: int) -> None:
        self.periods.append(period_ms)


def test_compute_interval_anchor_points() -> None:
    assert compute_interval(0) == 30
    assert compute_interval(100) == 30
    assert compute_interval(250) == 20
    assert compute_interval(400) == 10
    assert compute_interval(499) == 10


def test_compute_interval_rounds_to_nearest_ms() -> None:
    # 30 - 25/300 * 20 = 28.33
    assert compute_interval(125) == 28
    # 30 - 1/300 * 20 = 29.93
    assert compute_interval(101) == 30
    # 30 - 290/300 * 20 = 10.67
    assert compute_interval(390) == 11


def test_compute_interval_is_monotonically_non_increasing() -> None:
    values = [compute_interval(n) for n in range(0, 600)]
    assert all(a >= b for a, b in zip(values, values[1:]))
    assert set(values) <= set(range(10, 31))


def test_rate_controller_reschedules_only_on_change() -> None:
    state = SchedulerState.create(width=260, height=600, lane_width=26)
    ticker = RecordingTicker()
    rate = RateController(state, ticker=ticker)

    assert rate.update() is False
    assert ticker.periods == []

    style = SeverityStyle()
    for _ in range(250):
        state.queue.enqueue(make_event("m", "info", style))

    assert rate.update() is True
    assert state.rate.period_ms == 20
    assert ticker.periods == [20]

    # Same backlog: no new schedule.
    assert rate.update() is False
    assert ticker.periods == [20]

    state.queue.clear()
    assert rate.update() is True
    assert ticker.periods == [20, 30]


def test_rate_controller_without_ticker_still_tracks_period() -> None:
    state = SchedulerState.create(width=260, height=600, lane_width=26)
    rate = RateController(state)
    style = SeverityStyle()
    for _ in range(450):
        state.queue.enqueue(make_event("m", "info", style))

    assert rate.update() is True
    assert state.rate.period_ms == 10
