"""
Configuration loading: YAML file plus environment overrides.

File layout (every key optional)::

    view:
      paths: resources/views
      extensions: [".breeze", ".html"]
      cache_max_items: 256
      cache_ttl: 3600
      cache_dir: .breeze-cache
      allow_native: false

Relative paths are resolved against the directory of the config file.
Environment variables win over the file:
BREEZE_VIEWS_PATH, BREEZE_CACHE_MAX_ITEMS, BREEZE_CACHE_TTL,
BREEZE_CACHE_DIR, BREEZE_ALLOW_NATIVE.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..errors import ConfigError
from .model import EngineConfig

logger = logging.getLogger(__name__)

_YAML = YAML(typ="safe")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _to_int(value: Any, key: str, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected integer, got {value!r}")
    try:
        result = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"{key}: expected integer, got {value!r}")
    if result < minimum:
        raise ConfigError(f"{key}: must be >= {minimum}, got {result}")
    return result


def _to_float(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected number of seconds, got {value!r}")
    try:
        result = float(str(value).strip())
    except ValueError:
        raise ConfigError(f"{key}: expected number of seconds, got {value!r}")
    if result < 0:
        raise ConfigError(f"{key}: must be >= 0, got {result}")
    return result


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigError(f"{key}: expected boolean, got {value!r}")


def _to_extensions(value: Any, key: str) -> tuple[str, ...]:
    if isinstance(value, str):
        items = [v.strip() for v in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value]
    else:
        raise ConfigError(f"{key}: expected list of extensions, got {value!r}")
    result = tuple(v if v.startswith(".") else f".{v}" for v in items if v)
    if not result:
        raise ConfigError(f"{key}: at least one extension is required")
    return result


def _resolve_path(value: Any, base: Optional[Path]) -> Path:
    p = Path(str(value)).expanduser()
    if base is not None and not p.is_absolute():
        p = base / p
    return p


def _read_yaml(path: Path) -> Mapping[str, Any]:
    try:
        data = _YAML.load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}")
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{path}: top level must be a mapping")
    view = data.get("view", {}) or {}
    if not isinstance(view, Mapping):
        raise ConfigError(f"{path}: 'view' must be a mapping")
    return view


def config_from_mapping(view: Mapping[str, Any], base: Optional[Path] = None) -> EngineConfig:
    """Builds an EngineConfig from the ``view:`` mapping, validating each key."""
    cfg = EngineConfig()
    if "paths" in view:
        cfg.views_path = _resolve_path(view["paths"], base)
    if "extensions" in view:
        cfg.extensions = _to_extensions(view["extensions"], "view.extensions")
    if "cache_max_items" in view:
        cfg.cache_max_items = _to_int(view["cache_max_items"], "view.cache_max_items", 1)
    if "cache_ttl" in view:
        cfg.cache_ttl = _to_float(view["cache_ttl"], "view.cache_ttl")
    if view.get("cache_dir"):
        cfg.cache_dir = _resolve_path(view["cache_dir"], base)
    if "allow_native" in view:
        cfg.allow_native = _to_bool(view["allow_native"], "view.allow_native")
    return cfg


def apply_env(cfg: EngineConfig, env: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """Applies BREEZE_* environment overrides in place and returns the config."""
    env = os.environ if env is None else env
    if env.get("BREEZE_VIEWS_PATH"):
        cfg.views_path = _resolve_path(env["BREEZE_VIEWS_PATH"], None)
    if env.get("BREEZE_CACHE_MAX_ITEMS"):
        cfg.cache_max_items = _to_int(env["BREEZE_CACHE_MAX_ITEMS"], "BREEZE_CACHE_MAX_ITEMS", 1)
    if env.get("BREEZE_CACHE_TTL"):
        cfg.cache_ttl = _to_float(env["BREEZE_CACHE_TTL"], "BREEZE_CACHE_TTL")
    if env.get("BREEZE_CACHE_DIR"):
        cfg.cache_dir = _resolve_path(env["BREEZE_CACHE_DIR"], None)
    if "BREEZE_ALLOW_NATIVE" in env:
        cfg.allow_native = _to_bool(env["BREEZE_ALLOW_NATIVE"], "BREEZE_ALLOW_NATIVE")
    return cfg


def load_config(path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> EngineConfig:
    """
    Loads engine configuration.

    Args:
        path: YAML config file; None uses defaults
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated EngineConfig

    Raises:
        ConfigError: On unreadable files or invalid values
    """
    if path is not None:
        path = Path(path)
        cfg = config_from_mapping(_read_yaml(path), base=path.resolve().parent)
        logger.debug("Loaded config from %s", path)
    else:
        cfg = EngineConfig()
    return apply_env(cfg, env)


__all__ = ["load_config", "config_from_mapping", "apply_env"]
