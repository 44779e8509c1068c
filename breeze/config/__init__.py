from .model import EngineConfig, DEFAULT_EXTENSIONS, DEFAULT_VIEWS_PATH
from .load import load_config, config_from_mapping, apply_env

__all__ = [
    "EngineConfig",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_VIEWS_PATH",
    "load_config",
    "config_from_mapping",
    "apply_env",
]
