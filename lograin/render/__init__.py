"""Frame rendering, drawing surfaces and the status display."""

from __future__ import annotations

from lograin.render.renderer import Renderer
from lograin.render.status import StatusBoard, StatusSnapshot
from lograin.render.surface import PygameSurface, RecordingSurface, Surface, SurfaceEvents, open_surface

__all__ = [
    "PygameSurface",
    "RecordingSurface",
    "Renderer",
    "StatusBoard",
    "StatusSnapshot",
    "Surface",
    "SurfaceEvents",
    "open_surface",
]
