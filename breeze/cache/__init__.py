from .memory import TemplateCache, CacheEntry, fingerprint, INLINE_SOURCE
from .fs_cache import DiskTreeCache, DiskSnapshot

__all__ = [
    "TemplateCache",
    "CacheEntry",
    "fingerprint",
    "INLINE_SOURCE",
    "DiskTreeCache",
    "DiskSnapshot",
]
