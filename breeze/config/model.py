from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_VIEWS_PATH = "resources/views"
# Probe order when resolving a view name to a file
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".breeze", ".page", ".html", ".htm", ".chtm")
DEFAULT_CACHE_MAX_ITEMS = 256
DEFAULT_CACHE_TTL = 3600.0


@dataclass
class EngineConfig:
    """
    Tunables of the view engine.

    Attributes:
        views_path: Directory the view finder probes
        extensions: Ordered extension list tried for each view name
        cache_max_items: LRU capacity of the template cache (>= 1)
        cache_ttl: Entry lifetime in seconds; 0 means never expire
        cache_dir: Root of the disk tier; None keeps the cache memory-only
        allow_native: Opt-in for @native blocks (needs an injected extension)
    """
    views_path: Path = field(default_factory=lambda: Path(DEFAULT_VIEWS_PATH))
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    cache_max_items: int = DEFAULT_CACHE_MAX_ITEMS
    cache_ttl: float = DEFAULT_CACHE_TTL
    cache_dir: Optional[Path] = None
    allow_native: bool = False


__all__ = [
    "EngineConfig",
    "DEFAULT_VIEWS_PATH",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_CACHE_MAX_ITEMS",
    "DEFAULT_CACHE_TTL",
]
