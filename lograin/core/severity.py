from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping


class Severity(str, Enum):
    """The eight log levels, in their fixed declaration order.

    Declaration order matters: when two levels are equally frequent in an
    overflowing queue, the one declared first wins.
    """

    EMERGENCY = "emergency"
    ALERT = "alert"
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"
    INFO = "info"
    DEBUG = "debug"


SEVERITY_ORDER: tuple[str, ...] = tuple(s.value for s in Severity)

FALLBACK_SEVERITY = Severity.INFO.value


def normalize_level(level: object) -> str | None:
    """Lowercase a level name; None when it is not one of the eight severities."""

    if not isinstance(level, str):
        return None
    value = level.lower()
    return value if value in SEVERITY_ORDER else None


def tally_severities(levels: Iterable[str]) -> dict[str, int]:
    counts = {name: 0 for name in SEVERITY_ORDER}
    for level in levels:
        if level in counts:
            counts[level] += 1
    return counts


def predominant_severity(counts: Mapping[str, int]) -> str:
    """Return the most frequent severity; first maximum in declaration order wins.

    Falls back to "info" when every count is zero.
    """

    best, best_count = FALLBACK_SEVERITY, 0
    for name in SEVERITY_ORDER:
        count = counts.get(name, 0)
        if count > best_count:
            best, best_count = name, count
    return best
