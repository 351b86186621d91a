from __future__ import annotations

import random
from dataclasses import replace

from lograin.config.model import ChannelConfig, DisplayConfig, LograinConfig, SchedulerConfig
from lograin.render.surface import RecordingSurface
from lograin.runtime.visualizer import ReloadPolicy, VisualizerSession


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: int = 1_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_config(*, ambient: float = 0.0, reload_delay_ms: int = 10, blue: bool = False) -> LograinConfig:
    return LograinConfig(
        channel=ChannelConfig(url="ws://127.0.0.1:1/ws", reload_delay_ms=reload_delay_ms),
        display=DisplayConfig(backend="headless", blue_second_drop=blue),
        scheduler=replace(SchedulerConfig(), ambient_spawn_probability=ambient),
    )


def make_session(
    *,
    lanes: int = 10,
    height: int = 600,
    ambient: float = 0.0,
    blue: bool = False,
    seed: int = 1,
) -> tuple[VisualizerSession, RecordingSurface, FakeClock]:
    cfg = make_config(ambient=ambient, blue=blue)
    # Lane width is the largest glyph size (26 by default).
    surface = RecordingSurface(lanes * cfg.style.max_glyph_size, height)
    clock = FakeClock()
    session = VisualizerSession(
        cfg,
        surface,
        reload=ReloadPolicy(delay_ms=cfg.channel.reload_delay_ms),
        clock=clock,
        rng=random.Random(seed),
    )
    return session, surface, clock
