from __future__ import annotations

import random

from lograin.config.model import SchedulerConfig, SeverityStyle
from lograin.core.clock import Clock
from lograin.core.glyphs import random_glyph
from lograin.core.types import Drop
from lograin.render.surface import Surface
from lograin.scheduler.lanes import LaneAllocator
from lograin.scheduler.load import LoadMonitor
from lograin.scheduler.rate import RateController
from lograin.scheduler.state import SchedulerState


class Renderer:
    """Draws one frame per tick and drives the scheduler components.

    Frame order: refresh load windows and tick period, fade the previous
    frame, place queued events, draw and advance every drop, then sprinkle
    ambient drops into empty lanes.
    """

    def __init__(
        self,
        state: SchedulerState,
        surface: Surface,
        *,
        load: LoadMonitor,
        rate: RateController,
        allocator: LaneAllocator,
        style: SeverityStyle,
        cfg: SchedulerConfig,
        rng: random.Random,
        clock: Clock,
    ):
        self._state = state
        self._surface = surface
        self._load = load
        self._rate = rate
        self._allocator = allocator
        self._style = style
        self._cfg = cfg
        self._rng = rng
        self._clock = clock
        self.frames = 0

    def tick(self) -> None:
        now = self._clock()
        self._load.prune(now)
        self._rate.update()

        self._surface.fade(self._cfg.fade_alpha)
        self._allocator.drain(now)
        self._advance_drops()
        self.spawn_ambient()

        self._surface.present()
        self.frames += 1

    def _advance_drops(self) -> None:
        height = self._state.viewport.height
        lane_width = self._state.lane_width
        for lane_index, drops in enumerate(self._state.lanes):
            x = lane_index * lane_width
            # Reverse order so removal does not shift unvisited drops.
            for j in range(len(drops) - 1, -1, -1):
                drop = drops[j]
                self._surface.draw_glyph(self.next_glyph(drop), x, drop.pixel_y, drop.glyph_size, drop.color)
                drop.position += self._cfg.message_step if drop.is_message else self._cfg.ambient_step
                if drop.pixel_y > height:
                    del drops[j]

    def next_glyph(self, drop: Drop) -> str:
        """Glyph to show this tick; advances a message drop's cursor."""

        if not drop.is_message or not drop.content:
            return random_glyph(self._rng)
        glyph = drop.content[drop.cursor]
        drop.cursor = (drop.cursor + 1) % len(drop.content)
        return glyph

    def spawn_ambient(self) -> int:
        spawned = 0
        for drops in self._state.lanes:
            if drops or self._rng.random() >= self._cfg.ambient_spawn_probability:
                continue
            drops.append(
                Drop(
                    content="",
                    color=self._style.background_color,
                    severity="debug",
                    glyph_size=self._style.ambient_glyph_size,
                    is_message=False,
                )
            )
            spawned += 1
        return spawned
