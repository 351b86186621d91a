from __future__ import annotations

import asyncio
import logging

import pytest

from lograin.core.ticker import RepeatingTask


def test_rejects_non_positive_period() -> None:
    with pytest.raises(ValueError):
        RepeatingTask(lambda: None, 0)

    task = RepeatingTask(lambda: None, 10)
    with pytest.raises(ValueError):
        task.reschedule(-1)


def test_ticks_repeatedly_until_cancelled() -> None:
    calls: list[int] = []

    async def _run() -> RepeatingTask:
        task = RepeatingTask(lambda: calls.append(1), 5)
        task.start()
        await asyncio.sleep(0.1)
        task.cancel()
        count = len(calls)
        await asyncio.sleep(0.03)
        assert len(calls) == count
        return task

    task = asyncio.run(_run())
    assert len(calls) >= 3
    assert task.ticks == len(calls)
    assert not task.running


def test_reschedule_before_start_only_changes_period() -> None:
    task = RepeatingTask(lambda: None, 30)
    task.reschedule(12)
    assert task.period_ms == 12
    assert task.reschedules == 0
    assert not task.running


def test_reschedule_from_inside_a_tick_lets_the_tick_finish() -> None:
    log: list[str] = []
    periods = [5, 7]

    async def _run() -> RepeatingTask:
        task: RepeatingTask

        def on_tick() -> None:
            log.append("start")
            # Alternate periods so every tick reschedules.
            periods.reverse()
            task.reschedule(periods[0])
            log.append("end")

        task = RepeatingTask(on_tick, 5)
        task.start()
        await asyncio.sleep(0.12)
        task.cancel()
        return task

    task = asyncio.run(_run())
    assert len(log) >= 4
    assert log == ["start", "end"] * (len(log) // 2)
    assert task.reschedules == len(log) // 2


def test_callback_errors_are_logged_and_ticking_continues(caplog: pytest.LogCaptureFixture) -> None:
    calls: list[int] = []

    def flaky() -> None:
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")

    async def _run() -> None:
        task = RepeatingTask(flaky, 5, name="render")
        task.start()
        await asyncio.sleep(0.08)
        task.cancel()

    with caplog.at_level(logging.ERROR, logger="lograin.core.ticker"):
        asyncio.run(_run())

    assert len(calls) >= 2
    assert any(r.getMessage() == "tick_failed" for r in caplog.records)
