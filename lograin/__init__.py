"""lograin: a live log-stream visualizer.

Severity-tagged log events arrive over a push channel and fall down the
screen as glyph columns. The scheduler buffers, paces and places them; under
sustained overload it clears its queue with a visible signal instead of
falling behind.
"""

from __future__ import annotations

__version__ = "0.1.0"
