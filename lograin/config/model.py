from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from lograin.config.errors import ConfigError
from lograin.core.severity import SEVERITY_ORDER


_DEFAULT_GLYPH_SIZES: dict[str, int] = {
    "debug": 12,
    "info": 14,
    "notice": 16,
    "warning": 18,
    "error": 20,
    "critical": 22,
    "alert": 24,
    "emergency": 26,
}

_DEFAULT_COLORS: dict[str, str] = {
    "emergency": "#FF0000",
    "alert": "#FF0000",
    "critical": "#FF0000",
    "error": "#FF0000",
    "warning": "#FFA500",
    "notice": "#FFFF00",
    "info": "#FFFF00",
    "debug": "#00FF00",
}


def _get(d: Mapping[str, Any], path: str, default: Any) -> Any:
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return default
        cur = cur[part]
    return cur


def _int(d: Mapping[str, Any], path: str, default: int) -> int:
    value = _get(d, path, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"expected an integer, got {value!r}", path=path) from e


def _float(d: Mapping[str, Any], path: str, default: float) -> float:
    value = _get(d, path, default)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"expected a number, got {value!r}", path=path) from e


def _bool(d: Mapping[str, Any], path: str, default: bool) -> bool:
    value = _get(d, path, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on", "0", "false", "no", "off"}:
        return value.strip().lower() in {"1", "true", "yes", "on"}
    raise ConfigError(f"expected a boolean, got {value!r}", path=path)


@dataclass(frozen=True, slots=True)
class SeverityStyle:
    """Per-severity glyph sizes and colors."""

    glyph_sizes: Mapping[str, int] = field(default_factory=lambda: dict(_DEFAULT_GLYPH_SIZES))
    colors: Mapping[str, str] = field(default_factory=lambda: dict(_DEFAULT_COLORS))
    base_glyph_size: int = 12
    ambient_glyph_size: int = 10
    background_color: str = "#004400"
    second_drop_color: str = "#0000FF"

    @property
    def max_glyph_size(self) -> int:
        return max(self.glyph_sizes.values())

    def glyph_size_for(self, severity: str) -> int:
        return self.glyph_sizes.get(severity, self.base_glyph_size)

    def color_for(self, severity: str) -> str:
        return self.colors.get(severity) or self.colors["debug"]


@dataclass(frozen=True, slots=True)
class SchedulerConfig:
    queue_capacity: int = 500
    default_interval_ms: int = 30
    min_interval_ms: int = 10
    slow_threshold: int = 100
    fast_threshold: int = 400
    window_ms: int = 10_000
    multi_lane_floor_mps: float = 20.0
    mps_per_extra_lane: float = 2.0
    stats_interval_ms: int = 1000
    cleared_display_ms: int = 1500
    fade_alpha: float = 0.05
    message_step: float = 0.9
    ambient_step: float = 1.0
    ambient_spawn_probability: float = 0.025
    overflow_glyphs_min: int = 5
    overflow_glyphs_max: int = 8


@dataclass(frozen=True, slots=True)
class ChannelConfig:
    url: str = "ws://localhost:2069/ws"
    reload_delay_ms: int = 3000


@dataclass(frozen=True, slots=True)
class RelayConfig:
    host: str = "0.0.0.0"
    port: int = 2069
    stats_interval_s: float = 1.0


@dataclass(frozen=True, slots=True)
class DisplayConfig:
    backend: str = "pygame"
    width: int = 1280
    height: int = 720
    title: str = "lograin"
    font: str = "monospace"
    blue_second_drop: bool = False
    seed: int | None = None


@dataclass(frozen=True, slots=True)
class LograinConfig:
    channel: ChannelConfig = field(default_factory=ChannelConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    style: SeverityStyle = field(default_factory=SeverityStyle)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "LograinConfig":
        """Build a typed config from a loaded YAML dict; absent keys keep their defaults."""

        s = SchedulerConfig()
        scheduler = SchedulerConfig(
            queue_capacity=_int(raw, "scheduler.queue_capacity", s.queue_capacity),
            default_interval_ms=_int(raw, "scheduler.default_interval_ms", s.default_interval_ms),
            min_interval_ms=_int(raw, "scheduler.min_interval_ms", s.min_interval_ms),
            slow_threshold=_int(raw, "scheduler.slow_threshold", s.slow_threshold),
            fast_threshold=_int(raw, "scheduler.fast_threshold", s.fast_threshold),
            window_ms=_int(raw, "scheduler.window_ms", s.window_ms),
            multi_lane_floor_mps=_float(raw, "scheduler.multi_lane_floor_mps", s.multi_lane_floor_mps),
            mps_per_extra_lane=_float(raw, "scheduler.mps_per_extra_lane", s.mps_per_extra_lane),
            stats_interval_ms=_int(raw, "scheduler.stats_interval_ms", s.stats_interval_ms),
            cleared_display_ms=_int(raw, "scheduler.cleared_display_ms", s.cleared_display_ms),
            fade_alpha=_float(raw, "scheduler.fade_alpha", s.fade_alpha),
            message_step=_float(raw, "scheduler.message_step", s.message_step),
            ambient_step=_float(raw, "scheduler.ambient_step", s.ambient_step),
            ambient_spawn_probability=_float(
                raw, "scheduler.ambient_spawn_probability", s.ambient_spawn_probability
            ),
            overflow_glyphs_min=_int(raw, "scheduler.overflow_glyphs_min", s.overflow_glyphs_min),
            overflow_glyphs_max=_int(raw, "scheduler.overflow_glyphs_max", s.overflow_glyphs_max),
        )
        if scheduler.slow_threshold >= scheduler.fast_threshold:
            raise ConfigError("must be below scheduler.fast_threshold", path="scheduler.slow_threshold")
        if scheduler.min_interval_ms <= 0 or scheduler.min_interval_ms > scheduler.default_interval_ms:
            raise ConfigError("must be in (0, default_interval_ms]", path="scheduler.min_interval_ms")
        if scheduler.queue_capacity <= 0:
            raise ConfigError("must be positive", path="scheduler.queue_capacity")
        if scheduler.overflow_glyphs_min < 1:
            raise ConfigError("must be at least 1", path="scheduler.overflow_glyphs_min")
        if scheduler.overflow_glyphs_min > scheduler.overflow_glyphs_max:
            raise ConfigError("must not exceed scheduler.overflow_glyphs_max", path="scheduler.overflow_glyphs_min")

        st = SeverityStyle()
        sizes = dict(st.glyph_sizes)
        colors = dict(st.colors)
        for name in SEVERITY_ORDER:
            sizes[name] = _int(raw, f"style.glyph_sizes.{name}", sizes[name])
            colors[name] = str(_get(raw, f"style.colors.{name}", colors[name]))
        for name, size in sizes.items():
            if size <= 0:
                raise ConfigError("must be positive", path=f"style.glyph_sizes.{name}")
        style = SeverityStyle(
            glyph_sizes=sizes,
            colors=colors,
            base_glyph_size=_int(raw, "style.base_glyph_size", st.base_glyph_size),
            ambient_glyph_size=_int(raw, "style.ambient_glyph_size", st.ambient_glyph_size),
            background_color=str(_get(raw, "style.background_color", st.background_color)),
            second_drop_color=str(_get(raw, "style.second_drop_color", st.second_drop_color)),
        )
        for key in ("base_glyph_size", "ambient_glyph_size"):
            if getattr(style, key) <= 0:
                raise ConfigError("must be positive", path=f"style.{key}")

        c = ChannelConfig()
        channel = ChannelConfig(
            url=str(_get(raw, "channel.url", c.url)),
            reload_delay_ms=_int(raw, "channel.reload_delay_ms", c.reload_delay_ms),
        )

        r = RelayConfig()
        relay = RelayConfig(
            host=str(_get(raw, "relay.host", r.host)),
            port=_int(raw, "relay.port", r.port),
            stats_interval_s=_float(raw, "relay.stats_interval_s", r.stats_interval_s),
        )

        d = DisplayConfig()
        seed = None if _get(raw, "display.seed", None) is None else _int(raw, "display.seed", 0)
        display = DisplayConfig(
            backend=str(_get(raw, "display.backend", d.backend)),
            width=_int(raw, "display.width", d.width),
            height=_int(raw, "display.height", d.height),
            title=str(_get(raw, "display.title", d.title)),
            font=str(_get(raw, "display.font", d.font)),
            blue_second_drop=_bool(raw, "display.blue_second_drop", d.blue_second_drop),
            seed=seed,
        )
        if display.backend not in {"pygame", "headless"}:
            raise ConfigError(f"unknown backend {display.backend!r}; expected 'pygame' or 'headless'", path="display.backend")

        return cls(channel=channel, relay=relay, display=display, scheduler=scheduler, style=style)
