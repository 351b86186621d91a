from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    tests_dir = Path(__file__).resolve().parent
    # Repo root for `lograin`, tests/ for the shared `helpers` module.
    for p in (tests_dir.parent, tests_dir):
        if str(p) not in sys.path:
            sys.path.insert(0, str(p))
