from __future__ import annotations

import logging
import random
from typing import Callable

from lograin.config.model import SeverityStyle
from lograin.core.glyphs import random_glyphs
from lograin.core.severity import predominant_severity, tally_severities
from lograin.core.types import Drop
from lograin.scheduler.queue import EventQueue
from lograin.scheduler.state import SchedulerState


logger = logging.getLogger(__name__)


class OverflowHandler:
    """Clears a full queue and shows the loss as one synchronized wave.

    Called by `EventQueue.enqueue` when the queue reaches capacity. Every lane
    is replaced with a single short drop colored for the severity that
    dominated the discarded backlog.
    """

    def __init__(
        self,
        state: SchedulerState,
        style: SeverityStyle,
        *,
        rng: random.Random,
        glyphs_min: int = 5,
        glyphs_max: int = 8,
        on_cleared: Callable[[], None] | None = None,
    ):
        self._state = state
        self._style = style
        self._rng = rng
        self._glyphs_min = glyphs_min
        self._glyphs_max = glyphs_max
        self._on_cleared = on_cleared

    def __call__(self, queue: EventQueue) -> None:
        counts = tally_severities(event.severity for event in queue)
        winner = predominant_severity(counts)

        dropped = queue.clear()
        self._state.metrics.total_lost += dropped

        color = self._style.color_for(winner)
        glyph_size = self._style.glyph_size_for(winner)
        lanes = self._state.lanes
        for i in range(len(lanes)):
            lane = lanes[i]
            lane.clear()
            lane.append(
                Drop(
                    content=random_glyphs(self._rng, self._rng.randint(self._glyphs_min, self._glyphs_max)),
                    color=color,
                    severity=winner,
                    glyph_size=glyph_size,
                    is_message=True,
                )
            )

        logger.warning(
            "queue_overflow",
            extra={
                "dropped": dropped,
                "severity": winner,
                "total_lost": self._state.metrics.total_lost,
                "lanes": len(lanes),
            },
        )

        if self._on_cleared is not None:
            self._on_cleared()
