from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

import yaml
from dotenv import load_dotenv

from lograin.config.errors import ConfigError


_ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# profile -> config files under configs/, later files overlay earlier ones
_PROFILES: dict[str, tuple[str, ...]] = {
    "app": ("app.yaml",),
    "dev": ("app.yaml", "dev.yaml"),
}


def _deep_merge(base: MutableMapping[str, Any], overlay: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for k, v in overlay.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            base[k] = _deep_merge(dict(base[k]), v)  # type: ignore[arg-type]
        else:
            base[k] = v
    return base


def _read_fragment(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigError("Config file not found", path=str(path))

    try:
        text = path.read_text(encoding="utf-8")
        fragment = yaml.safe_load(text) if text.strip() else {}
    except Exception as e:  # noqa: BLE001
        raise ConfigError(f"Failed to read YAML config: {e}", path=str(path)) from e

    if fragment is None:
        return {}
    if not isinstance(fragment, Mapping):
        raise ConfigError("Top-level YAML must be a mapping", path=str(path))
    return fragment


def _expand(obj: Any, *, key_path: str, unresolved: list[tuple[str, str, str]]) -> Any:
    """Expand ${ENV_VAR} placeholders, collecting (var, reason, key_path) misses."""

    if isinstance(obj, str):
        def repl(match: re.Match[str]) -> str:
            name = match.group(1)
            value = os.getenv(name)
            if value is None or value == "":
                unresolved.append((name, "missing" if value is None else "empty", key_path or "<root>"))
                return match.group(0)
            return value

        return _ENV_PLACEHOLDER_RE.sub(repl, obj)

    if isinstance(obj, Mapping):
        return {
            str(k): _expand(v, key_path=f"{key_path}.{k}" if key_path else str(k), unresolved=unresolved)
            for k, v in obj.items()
        }

    if isinstance(obj, list):
        return [_expand(v, key_path=f"{key_path}[{i}]", unresolved=unresolved) for i, v in enumerate(obj)]

    return obj


def load_config(
    paths: Path | Sequence[Path],
    *,
    load_dotenv_file: bool = True,
    dotenv_path: Path | None = None,
) -> dict[str, Any]:
    """Load YAML config files with strict ${ENV_VAR} expansion.

    Args:
        paths: One or more YAML files, merged in order (later files win).
        load_dotenv_file: Whether to load a .env file before expansion.
        dotenv_path: Optional explicit .env path; defaults to ./.env.

    Raises:
        ConfigError: If a file is missing or invalid, or a placeholder is unresolved.
    """

    file_list: list[Path] = [paths] if isinstance(paths, Path) else list(paths)
    if not file_list:
        raise ConfigError("No config files provided")

    if load_dotenv_file:
        # Already-set environment variables take priority over .env entries.
        load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)

    merged: dict[str, Any] = {}
    for p in file_list:
        merged = dict(_deep_merge(merged, _read_fragment(p)))

    unresolved: list[tuple[str, str, str]] = []
    expanded = _expand(merged, key_path="", unresolved=unresolved)

    if unresolved:
        sources = ",".join(str(p) for p in file_list)
        lines = ["Unresolved environment variables in config:"]
        lines.extend(f"- {name} ({reason}) at {where} in {sources}" for name, reason, where in unresolved)
        raise ConfigError("\n".join(lines))

    return expanded


def resolve_profile_configs(*, profile: str, configs_dir: Path) -> list[Path]:
    """Resolve the config file list for a profile.

    - profile=app -> [configs/app.yaml]
    - profile=dev -> [configs/app.yaml, configs/dev.yaml]
    """

    names = _PROFILES.get(profile)
    if names is None:
        raise ConfigError(f"Unknown profile: {profile}")
    return [configs_dir / name for name in names]
