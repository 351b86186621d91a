from __future__ import annotations

from lograin.scheduler.load import LoadMonitor, multi_lane_count
from lograin.scheduler.state import Metrics


def test_multi_lane_count_thresholds() -> None:
    assert multi_lane_count(25) == 2
    assert multi_lane_count(19) == 0
    assert multi_lane_count(20) == 0
    assert multi_lane_count(21.9) == 0
    assert multi_lane_count(22) == 1
    assert multi_lane_count(0) == 0


def test_rates_are_counts_over_ten_seconds() -> None:
    metrics = Metrics()
    load = LoadMonitor(metrics)

    for t in range(0, 250):
        load.record_arrival(10_000 + t * 40)
    for t in range(0, 30):
        load.record_placement(10_000 + t * 300)

    load.prune(19_999)
    assert load.messages_per_second() == 25.0
    assert load.placements_per_second() == 3.0
    assert load.multi_lane_count() == 2


def test_prune_drops_entries_older_than_window() -> None:
    metrics = Metrics()
    load = LoadMonitor(metrics)
    for ts in (0, 5_000, 9_999, 10_000, 15_000):
        load.record_arrival(ts)
        load.record_placement(ts)

    load.prune(20_000)

    assert list(metrics.arrivals) == [10_000, 15_000]
    assert list(metrics.placements) == [10_000, 15_000]
    assert load.messages_per_second() == 0.2


def test_prune_on_empty_windows_is_harmless() -> None:
    metrics = Metrics()
    load = LoadMonitor(metrics)
    load.prune(123)
    assert load.messages_per_second() == 0.0
    assert load.multi_lane_count() == 0
