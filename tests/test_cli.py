from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator

import pytest

from lograin.config.loader import load_config
from lograin.runtime import lifecycle
from lograin.runtime.lifecycle import main


CONFIGS_DIR = Path(__file__).resolve().parents[1] / "configs"


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_print_config_dumps_expanded_config(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--config", str(CONFIGS_DIR / "app.yaml"), "print-config"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["channel"]["url"] == "ws://localhost:2069/ws"
    assert out["scheduler"]["queue_capacity"] == 500
    assert out["style"]["glyph_sizes"]["emergency"] == 26


def test_missing_config_file_exits_with_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--config", str(tmp_path / "missing.yaml"), "print-config"])

    assert code == 2
    assert "ConfigError" in capsys.readouterr().err


def _load_without_dotenv(paths):  # noqa: ANN001
    return load_config(paths, load_dotenv_file=False)


def test_unresolved_env_var_in_dev_profile_exits_with_2(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(CONFIGS_DIR.parent)
    monkeypatch.delenv("LOGRAIN_CHANNEL_URL", raising=False)
    # Keep a developer's local .env out of the picture.
    monkeypatch.setattr(lifecycle, "load_config", _load_without_dotenv)

    assert main(["--profile", "dev", "print-config"]) == 2


def test_unknown_argument_returns_argparse_code() -> None:
    assert main(["--bogus"]) == 2


def test_headless_run_stops_when_visualizer_returns(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    async def fake_run_visualizer(cfg, *, surface=None):  # noqa: ANN001
        seen["cfg"] = cfg
        seen["surface"] = surface
        return 0

    monkeypatch.setattr("lograin.runtime.visualizer.run_visualizer", fake_run_visualizer)

    code = main(["--config", str(CONFIGS_DIR / "app.yaml"), "run", "--headless"])

    assert code == 0
    assert type(seen["surface"]).__name__ == "RecordingSurface"


def test_invalid_seed_exits_with_2(tmp_path: Path) -> None:
    cfg_path = tmp_path / "app.yaml"
    cfg_path.write_text("display:\n  seed: abc\n", encoding="utf-8")

    assert main(["--config", str(cfg_path), "print-config"]) == 2
