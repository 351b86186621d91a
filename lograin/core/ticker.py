from __future__ import annotations

import asyncio
import logging
from typing import Callable


logger = logging.getLogger(__name__)


class RepeatingTask:
    """A periodic callback on the running event loop, with a changeable period.

    Changing the period cancels the current schedule and starts a new one.
    The callback is synchronous, so a tick that is already running when
    `reschedule()` is called (including a tick that calls it) always finishes
    first: the old schedule only observes its cancellation at its next sleep.
    Ticks from the old and new schedules therefore never overlap.
    """

    def __init__(self, callback: Callable[[], None], period_ms: int, *, name: str = "tick"):
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        self._callback = callback
        self._period_ms = int(period_ms)
        self._name = name
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0
        self.reschedules = 0

    @property
    def period_ms(self) -> int:
        return self._period_ms

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._period_ms), name=f"{self._name}-{self._period_ms}ms"
        )

    def reschedule(self, period_ms: int) -> None:
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        old = self._period_ms
        self._period_ms = int(period_ms)
        if self._task is None:
            return

        self._task.cancel()
        self._task = None
        self.reschedules += 1
        self.start()
        logger.debug("tick_rescheduled", extra={"task": self._name, "old_ms": old, "new_ms": self._period_ms})

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self, period_ms: int) -> None:
        period_s = period_ms / 1000.0
        while True:
            await asyncio.sleep(period_s)
            self.ticks += 1
            try:
                self._callback()
            except Exception:  # noqa: BLE001
                # A failing callback does not end the schedule.
                logger.exception("tick_failed", extra={"task": self._name})
