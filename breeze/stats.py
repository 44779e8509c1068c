"""
Report schema for cache inspection (``breeze cache stats`` and ViewEngine.cache_stats).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class DiskStats(BaseModel):
    enabled: bool
    path: str
    exists: bool
    size_bytes: int = 0
    entries: int = 0


class CacheStats(BaseModel):
    """Counters and configured bounds of one TemplateCache instance."""
    hits: int = 0
    misses: int = 0
    disk_hits: int = 0
    entries: int = 0
    max_items: int
    ttl_seconds: float = Field(description="0 means entries never expire")
    disk: Optional[DiskStats] = None


__all__ = ["CacheStats", "DiskStats"]
