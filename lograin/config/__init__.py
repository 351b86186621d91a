"""Configuration loading and schema.

- YAML-first configuration under configs/*.yaml
- Strict ${ENV_VAR} expansion (missing/empty env vars are errors)
"""

from __future__ import annotations

from lograin.config.errors import ConfigError, LograinError
from lograin.config.loader import load_config, resolve_profile_configs
from lograin.config.model import LograinConfig

__all__ = ["ConfigError", "LograinConfig", "LograinError", "load_config", "resolve_profile_configs"]
