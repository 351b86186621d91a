from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import Sequence

from lograin.config.errors import ConfigError
from lograin.config.loader import load_config, resolve_profile_configs
from lograin.config.model import LograinConfig
from lograin.observability.logging import configure_logging


logger = logging.getLogger(__name__)

_COMMANDS = {"run", "relay", "print-config"}


def _redact_secrets(obj):  # noqa: ANN001
    """Best-effort redaction for human-facing config dumps."""

    if isinstance(obj, dict):
        out = {}
        for k, v in obj.items():
            if isinstance(k, str) and any(p in k.lower() for p in ("api_key", "token", "secret", "password")):
                out[k] = "<redacted>"
            else:
                out[k] = _redact_secrets(v)
        return out
    if isinstance(obj, list):
        return [_redact_secrets(x) for x in obj]
    return obj


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lograin",
        description="Live log-stream visualizer and its HTTP relay",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML config file (skips profile resolution)",
    )
    group.add_argument(
        "--profile",
        choices=["app", "dev"],
        default="app",
        help="Config profile under ./configs (app loads app.yaml; dev overlays dev.yaml)",
    )

    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Run the visualizer")
    run_p.add_argument("--headless", action="store_true", help="Render into memory instead of a window")
    run_p.set_defaults(command="run")

    relay_p = sub.add_parser("relay", help="Run the HTTP/WebSocket relay server")
    relay_p.add_argument("--port", type=int, default=None, help="Override relay.port")
    relay_p.set_defaults(command="relay")

    print_p = sub.add_parser("print-config", help="Load and print the expanded config")
    print_p.set_defaults(command="print-config")

    return parser


def _load(ns: argparse.Namespace) -> LograinConfig:
    if ns.config is not None:
        config_paths = [ns.config]
    else:
        config_paths = resolve_profile_configs(profile=ns.profile, configs_dir=Path.cwd() / "configs")

    raw = load_config(config_paths)
    logger.info("config_loaded", extra={"config_files": [str(p) for p in config_paths]})
    return LograinConfig.from_mapping(raw)


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint referenced by pyproject.toml."""

    argv_list = list(argv) if argv is not None else sys.argv[1:]

    # Default to `run` when no subcommand is given.
    if not any(a in _COMMANDS for a in argv_list):
        argv_list = [*argv_list, "run"]

    parser = _build_parser()

    try:
        ns = parser.parse_args(argv_list)
    except SystemExit as e:
        code = e.code
        return int(code) if isinstance(code, int) else 1

    configure_logging(level=ns.log_level)

    try:
        cfg = _load(ns)

        if ns.command == "print-config":
            sys.stdout.write(json.dumps(_redact_secrets(asdict(cfg)), ensure_ascii=False, indent=2))
            sys.stdout.write("\n")
            return 0

        if ns.command == "relay":
            from lograin.relay.server import run_relay

            relay_cfg = cfg.relay
            if ns.port is not None:
                relay_cfg = replace(relay_cfg, port=ns.port)
            run_relay(relay_cfg)
            return 0

        from lograin.render.surface import RecordingSurface
        from lograin.runtime.visualizer import run_visualizer

        surface = RecordingSurface(cfg.display.width, cfg.display.height) if ns.headless else None
        logger.info("visualizer_starting", extra={"channel": cfg.channel.url, "backend": "headless" if ns.headless else cfg.display.backend})
        asyncio.run(run_visualizer(cfg, surface=surface))
        return 0

    except ConfigError as e:
        logger.error("config_error", extra={"error": str(e)})
        sys.stderr.write(f"ConfigError: {e}\n")
        return 2
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130
    except Exception as e:  # noqa: BLE001
        logger.exception("fatal_error")
        sys.stderr.write(f"Fatal error: {e}\n")
        return 1
