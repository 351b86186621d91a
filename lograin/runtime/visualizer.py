"""Visualizer runtime: one session per channel connection.

A session owns a fresh scheduler state, the render and stats schedules and
the channel listener callbacks. When the channel drops, the session keeps
rendering through the reload delay and then ends; the caller starts a brand
new session. Nothing carries over between sessions.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Protocol

from lograin.config.model import LograinConfig
from lograin.core.clock import Clock, monotonic_ms
from lograin.core.ticker import RepeatingTask
from lograin.core.types import ConnectionState
from lograin.io.channel import ChannelListener, LogChannel
from lograin.render.renderer import Renderer
from lograin.render.status import StatusBoard
from lograin.render.surface import Surface, open_surface
from lograin.scheduler.intake import Intake
from lograin.scheduler.lanes import LaneAllocator
from lograin.scheduler.load import LoadMonitor
from lograin.scheduler.overflow import OverflowHandler
from lograin.scheduler.rate import RateController
from lograin.scheduler.state import SchedulerState


logger = logging.getLogger(__name__)

QUIT = "quit"


class Channel(Protocol):
    async def run(self, listener: ChannelListener) -> str: ...


@dataclass(slots=True)
class ReloadPolicy:
    """Full reset after a channel failure, following a fixed delay."""

    delay_ms: int = 3000
    reloads: int = 0
    last_reason: str | None = None

    async def wait(self, reason: str, *, interrupt: asyncio.Event | None = None) -> bool:
        """Sleep out the delay; returns False if `interrupt` fired first."""

        self.last_reason = reason
        logger.warning("visualizer_reload_scheduled", extra={"reason": reason, "delay_ms": self.delay_ms})
        delay_s = self.delay_ms / 1000.0
        if interrupt is None:
            await asyncio.sleep(delay_s)
        else:
            try:
                await asyncio.wait_for(interrupt.wait(), timeout=delay_s)
                return False
            except TimeoutError:
                pass
        self.reloads += 1
        return True


class VisualizerSession:
    def __init__(
        self,
        cfg: LograinConfig,
        surface: Surface,
        *,
        reload: ReloadPolicy | None = None,
        clock: Clock = monotonic_ms,
        rng: random.Random | None = None,
    ):
        sc = cfg.scheduler
        self._surface = surface
        self.reload = reload or ReloadPolicy(delay_ms=cfg.channel.reload_delay_ms)
        self._closed = asyncio.Event()
        rng = rng or random.Random(cfg.display.seed)

        width, height = surface.size()
        self.state = SchedulerState.create(
            width=width,
            height=height,
            lane_width=cfg.style.max_glyph_size,
            queue_capacity=sc.queue_capacity,
            period_ms=sc.default_interval_ms,
        )
        self.load = LoadMonitor(
            self.state.metrics,
            window_ms=sc.window_ms,
            floor_mps=sc.multi_lane_floor_mps,
            mps_per_lane=sc.mps_per_extra_lane,
        )
        self.status = StatusBoard(
            self.state,
            self.load,
            clock=clock,
            cleared_ms=sc.cleared_display_ms,
            sink=surface.show_status,
        )
        self.overflow = OverflowHandler(
            self.state,
            cfg.style,
            rng=rng,
            glyphs_min=sc.overflow_glyphs_min,
            glyphs_max=sc.overflow_glyphs_max,
            on_cleared=self.status.mark_cleared,
        )
        self.state.queue.set_overflow_handler(self.overflow)
        self.intake = Intake(self.state, self.load, cfg.style, clock=clock)
        self.rate = RateController(
            self.state,
            default_ms=sc.default_interval_ms,
            min_ms=sc.min_interval_ms,
            slow_threshold=sc.slow_threshold,
            fast_threshold=sc.fast_threshold,
        )
        self.allocator = LaneAllocator(
            self.state,
            self.load,
            cfg.style,
            rng=rng,
            highlight_second_drop=cfg.display.blue_second_drop,
        )
        self.renderer = Renderer(
            self.state,
            surface,
            load=self.load,
            rate=self.rate,
            allocator=self.allocator,
            style=cfg.style,
            cfg=sc,
            rng=rng,
            clock=clock,
        )
        self.render_task = RepeatingTask(self.frame, self.state.rate.period_ms, name="render")
        self.rate.bind(self.render_task)
        self.stats_task = RepeatingTask(self.status.refresh, sc.stats_interval_ms, name="stats")

    # Channel listener

    def on_connect(self) -> None:
        self.status.set_connection(ConnectionState.CONNECTED)

    def on_message(self, message: str, level: str) -> None:
        self.intake.accept(message, level)

    def on_disconnect(self, reason: str) -> None:
        self.status.set_connection(ConnectionState.DISCONNECTED)

    # Frames

    def frame(self) -> None:
        events = self._surface.poll()
        if events.closed:
            self._closed.set()
            return
        if events.resized_to is not None:
            lanes = self.state.resize(*events.resized_to)
            logger.info("viewport_resized", extra={"width": events.resized_to[0], "height": events.resized_to[1], "lanes": lanes})
        self.renderer.tick()

    async def run(self, channel: Channel) -> str:
        """Run until the window closes or the channel drops and the reload delay passes.

        Returns QUIT for a closed window, otherwise the channel's end reason.
        """

        self._surface.clear()
        self.status.refresh()
        self.render_task.start()
        self.stats_task.start()
        logger.info(
            "session_started",
            extra={"lanes": len(self.state.lanes), "width": self.state.viewport.width, "height": self.state.viewport.height},
        )

        channel_task = asyncio.create_task(channel.run(self), name="channel")
        closed_task = asyncio.create_task(self._closed.wait(), name="surface-closed")
        try:
            done, _ = await asyncio.wait({channel_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
            if closed_task in done:
                return QUIT

            reason = channel_task.result()
            if not await self.reload.wait(reason, interrupt=self._closed):
                return QUIT
            return reason
        finally:
            for task in (channel_task, closed_task):
                task.cancel()
            self.render_task.cancel()
            self.stats_task.cancel()
            logger.info(
                "session_ended",
                extra={
                    "received": self.state.metrics.total_received,
                    "placed": self.state.metrics.total_placed,
                    "lost": self.state.metrics.total_lost,
                },
            )


async def run_visualizer(cfg: LograinConfig, *, surface: Surface | None = None) -> int:
    """Run sessions back to back until the window is closed; returns the reload count."""

    policy = ReloadPolicy(delay_ms=cfg.channel.reload_delay_ms)
    with surface or open_surface(cfg.display) as surf:
        while True:
            session = VisualizerSession(cfg, surf, reload=policy)
            outcome = await session.run(LogChannel(cfg.channel))
            if outcome == QUIT:
                logger.info("visualizer_stopped", extra={"reloads": policy.reloads})
                return policy.reloads
            logger.info("visualizer_reload", extra={"reason": outcome, "reloads": policy.reloads})
