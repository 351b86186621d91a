from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True, slots=True)
class Event:
    """A received log entry waiting in the queue for a free lane."""

    text: str
    severity: str
    color: str
    glyph_size: int


@dataclass(slots=True)
class Drop:
    """A glyph column falling down one lane.

    `position` is measured in glyph rows; the pixel offset is
    `position * glyph_size`. Message drops cycle through `content` one glyph
    per tick; ambient drops show a random glyph every tick.
    """

    content: str
    color: str
    severity: str
    glyph_size: int
    is_message: bool = True
    position: float = 0.0
    cursor: int = 0

    @property
    def pixel_y(self) -> float:
        return self.position * self.glyph_size

    @classmethod
    def from_event(cls, event: Event, *, color: str | None = None) -> "Drop":
        return cls(
            content=event.text,
            color=color or event.color,
            severity=event.severity,
            glyph_size=event.glyph_size,
            is_message=True,
        )


@dataclass(slots=True)
class Viewport:
    width: int
    height: int
