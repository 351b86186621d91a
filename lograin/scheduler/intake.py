from __future__ import annotations

from lograin.config.model import SeverityStyle
from lograin.core.clock import Clock
from lograin.core.types import Event
from lograin.scheduler.load import LoadMonitor
from lograin.scheduler.state import SchedulerState


def make_event(message: str, level: str, style: SeverityStyle) -> Event:
    severity = level.lower()
    return Event(
        text=message,
        severity=severity,
        color=style.color_for(severity),
        # Unknown levels get the base size rather than an error.
        glyph_size=style.glyph_size_for(severity),
    )


class Intake:
    """Entry point for pushed log records: count, timestamp, enqueue."""

    def __init__(self, state: SchedulerState, load: LoadMonitor, style: SeverityStyle, *, clock: Clock):
        self._state = state
        self._load = load
        self._style = style
        self._clock = clock

    def accept(self, message: str, level: str) -> bool:
        """Queue one record; returns True if it tipped the queue into overflow."""

        self._state.metrics.total_received += 1
        self._load.record_arrival(self._clock())
        return self._state.queue.enqueue(make_event(message, level, self._style))
