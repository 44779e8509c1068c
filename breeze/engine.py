"""
ViewEngine: the facade tying view lookup, caching and rendering together.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .cache.fs_cache import DiskTreeCache
from .cache.memory import TemplateCache
from .config.model import EngineConfig
from .stats import CacheStats
from .template.filters import FilterFunc, FilterPipeline
from .template.native import NativeExtension
from .template.renderer import TemplateRenderer
from .views import ViewFinder

logger = logging.getLogger(__name__)


class ViewEngine:
    """
    Application-facing facade: one config, one cache, one renderer.

    Build it once at wiring time and share it between threads.

    Args:
        config: Engine configuration (defaults when None)
        native: Extension executing @native blocks; only used when
            ``config.allow_native`` is set
        cache: Pre-built cache (mainly for tests); built from config otherwise
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        native: Optional[NativeExtension] = None,
        cache: Optional[TemplateCache] = None,
    ):
        self.config = config or EngineConfig()

        if cache is None:
            disk = DiskTreeCache(self.config.cache_dir) if self.config.cache_dir else None
            cache = TemplateCache(self.config.cache_max_items, self.config.cache_ttl, disk=disk)
        self.cache = cache

        if native is not None and not self.config.allow_native:
            logger.warning("Native extension supplied but allow_native is off; @native blocks stay inert")
            native = None

        self.filters = FilterPipeline()
        self.renderer = TemplateRenderer(self.filters, native=native)
        self.finder = ViewFinder(self.config.views_path, self.config.extensions)

    def render(self, name: str, data: Any = None) -> str:
        """Renders a view by name; a missing view yields an explanatory string."""
        path = self.finder.find(name)
        if path is None:
            logger.debug("View %s not found in %s", name, self.finder.views_path)
            return self.finder.not_found_message(name)
        return self.render_file(path, data)

    def render_file(self, path: Path | str, data: Any = None) -> str:
        return self.renderer.render(self.cache.resolve_file(path), data)

    def render_string(self, text: str, data: Any = None) -> str:
        return self.renderer.render(self.cache.resolve_inline(text), data)

    def register_filter(self, name: str, func: FilterFunc) -> None:
        self.filters.register(name, func)

    def clear_cache(self, *, disk: bool = False) -> None:
        self.cache.clear(disk=disk)

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()


__all__ = ["ViewEngine"]
