from __future__ import annotations

import time
from typing import Callable


Clock = Callable[[], int]


def monotonic_ms() -> int:
    """Monotonic clock in milliseconds.

    Sliding windows and the "Cleared" display window are measured on this.
    """

    return int(time.monotonic() * 1000)
