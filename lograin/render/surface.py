"""Drawing surfaces for the rain display.

The renderer only needs two primitives: draw one glyph, and fade the whole
area with a translucent fill. `PygameSurface` draws into a resizable window;
`RecordingSurface` keeps the draw calls in memory for headless runs and tests.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from lograin.config.model import DisplayConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SurfaceEvents:
    closed: bool = False
    resized_to: tuple[int, int] | None = None


class Surface(Protocol):
    def __enter__(self) -> "Surface": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...  # noqa: ANN001

    def size(self) -> tuple[int, int]: ...

    def clear(self) -> None: ...

    def fade(self, alpha: float) -> None: ...

    def draw_glyph(self, glyph: str, x: float, y: float, size: int, color: str) -> None: ...

    def present(self) -> None: ...

    def poll(self) -> SurfaceEvents: ...

    def show_status(self, lines: Sequence[str]) -> None: ...


@dataclass(frozen=True, slots=True)
class GlyphCall:
    glyph: str
    x: float
    y: float
    size: int
    color: str


class RecordingSurface:
    """In-memory surface: remembers recent draw calls, never opens a window."""

    def __init__(self, width: int, height: int, *, history: int = 10_000):
        self._width = width
        self._height = height
        self.glyphs: deque[GlyphCall] = deque(maxlen=history)
        self.fades = 0
        self.frames = 0
        self.status_lines: list[str] = []
        self._pending_resize: tuple[int, int] | None = None
        self._closed = False

    def __enter__(self) -> "RecordingSurface":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None

    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def clear(self) -> None:
        self.glyphs.clear()

    def fade(self, alpha: float) -> None:
        self.fades += 1

    def draw_glyph(self, glyph: str, x: float, y: float, size: int, color: str) -> None:
        self.glyphs.append(GlyphCall(glyph=glyph, x=x, y=y, size=size, color=color))

    def present(self) -> None:
        self.frames += 1

    def show_status(self, lines: Sequence[str]) -> None:
        self.status_lines = list(lines)

    def resize(self, width: int, height: int) -> None:
        """Simulate a window resize, reported on the next poll()."""

        self._width, self._height = width, height
        self._pending_resize = (width, height)

    def close(self) -> None:
        self._closed = True

    def poll(self) -> SurfaceEvents:
        events = SurfaceEvents(closed=self._closed, resized_to=self._pending_resize)
        self._pending_resize = None
        return events


class PygameSurface:
    """Resizable pygame window with a monospace glyph grid."""

    def __init__(self, cfg: DisplayConfig):
        self._cfg = cfg
        self._pg: Any = None
        self._screen: Any = None
        self._overlay: Any = None
        self._fonts: dict[int, Any] = {}
        self._colors: dict[str, Any] = {}

    def __enter__(self) -> "PygameSurface":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def open(self) -> None:
        import pygame

        self._pg = pygame
        pygame.init()
        pygame.font.init()
        pygame.display.set_caption(self._cfg.title)
        self._screen = pygame.display.set_mode((self._cfg.width, self._cfg.height), pygame.RESIZABLE)
        self._rebuild_overlay()
        self.clear()
        logger.info(
            "surface_opened",
            extra={"backend": "pygame", "width": self._cfg.width, "height": self._cfg.height},
        )

    def close(self) -> None:
        if self._pg is None:
            return
        self._pg.quit()
        self._pg = None
        self._screen = None
        self._fonts.clear()
        logger.info("surface_closed")

    def _rebuild_overlay(self) -> None:
        pg = self._pg
        self._overlay = pg.Surface(self._screen.get_size(), pg.SRCALPHA)

    def _font(self, size: int) -> Any:
        font = self._fonts.get(size)
        if font is None:
            font = self._pg.font.SysFont(self._cfg.font, size)
            self._fonts[size] = font
        return font

    def _color(self, color: str) -> Any:
        c = self._colors.get(color)
        if c is None:
            c = self._pg.Color(color)
            self._colors[color] = c
        return c

    def size(self) -> tuple[int, int]:
        return self._screen.get_size()

    def clear(self) -> None:
        self._screen.fill((0, 0, 0))

    def fade(self, alpha: float) -> None:
        self._overlay.fill((0, 0, 0, int(alpha * 255)))
        self._screen.blit(self._overlay, (0, 0))

    def draw_glyph(self, glyph: str, x: float, y: float, size: int, color: str) -> None:
        image = self._font(size).render(glyph, True, self._color(color))
        # y is the glyph baseline, as on a text canvas.
        self._screen.blit(image, (int(x), int(y) - size))

    def present(self) -> None:
        self._pg.display.flip()

    def show_status(self, lines: Sequence[str]) -> None:
        self._pg.display.set_caption(f"{self._cfg.title} | " + " | ".join(lines))

    def poll(self) -> SurfaceEvents:
        pg = self._pg
        closed = False
        resized: tuple[int, int] | None = None
        for event in pg.event.get():
            if event.type == pg.QUIT:
                closed = True
            elif event.type == pg.VIDEORESIZE:
                resized = (event.w, event.h)
        if resized is not None:
            self._screen = pg.display.get_surface()
            self._rebuild_overlay()
        return SurfaceEvents(closed=closed, resized_to=resized)


def open_surface(cfg: DisplayConfig) -> PygameSurface | RecordingSurface:
    if cfg.backend == "headless":
        return RecordingSurface(cfg.width, cfg.height)
    return PygameSurface(cfg)
