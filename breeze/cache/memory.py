"""
In-memory template cache with LRU + TTL retention and an optional disk tier.

Keys are (source identity, SHA-256 of the template bytes), so a changed file
always recompiles regardless of its modification time.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..stats import CacheStats, DiskStats
from ..template.nodes import BlockNode, TemplateNode, TextNode
from ..template.parser import parse_template
from .fs_cache import DiskTreeCache

logger = logging.getLogger(__name__)

INLINE_SOURCE = "<inline>"

CacheKey = Tuple[str, str]


def fingerprint(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    tree: TemplateNode
    created_at: float


class TemplateCache:
    """
    Memoizes parsed template trees.

    One lock per instance guards the entry map and its recency order. Reading,
    hashing, parsing and disk I/O happen outside the lock; concurrent misses
    for the same content may parse twice, which is harmless because parsing
    is pure.

    Args:
        max_items: LRU capacity (entry count, >= 1)
        ttl: Seconds an entry stays valid; 0 disables expiry
        disk: Optional content-addressed disk tier
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        max_items: int = 256,
        ttl: float = 3600.0,
        *,
        disk: Optional[DiskTreeCache] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_items < 1:
            raise ValueError("max_items must be >= 1")
        if ttl < 0:
            raise ValueError("ttl must be >= 0")
        self.max_items = int(max_items)
        self.ttl = float(ttl)
        self.disk = disk
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._disk_hits = 0

    # --------------------------- RESOLVE --------------------------- #

    def resolve_inline(self, text: str) -> TemplateNode:
        """Tree for raw template text, memoized by the hash of the text."""
        data = text.encode("utf-8")
        key = (INLINE_SOURCE, fingerprint(data))
        return self._resolve(key, lambda: text)

    def resolve_file(self, path: Path | str) -> TemplateNode:
        """
        Tree for a template file.

        The file is read on every call; the fingerprint of its bytes decides
        between hit and recompile. An unreadable file yields a tree with an
        explanatory text node and is not cached.
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning("Cannot read template file %s: %s", path, e)
            return BlockNode(children=(TextNode(text=f"Template [{path}] could not be read"),))

        try:
            source_id = str(path.resolve())
        except OSError:
            source_id = str(path.absolute())
        key = (source_id, fingerprint(data))
        return self._resolve(key, lambda: data.decode("utf-8", errors="replace"))

    def _resolve(self, key: CacheKey, load_text: Callable[[], str]) -> TemplateNode:
        with self._lock:
            tree = self._lookup_locked(key)
            if tree is not None:
                self._hits += 1
                return tree
            self._misses += 1

        source_id, fp = key
        tree = self.disk.get(fp) if self.disk is not None else None
        if tree is not None:
            logger.debug("Disk cache hit for %s (%s)", source_id, fp[:12])
            with self._lock:
                self._disk_hits += 1
        else:
            logger.debug("Cache miss for %s (%s), parsing", source_id, fp[:12])
            tree = parse_template(load_text())
            if self.disk is not None:
                self.disk.put(fp, tree)

        with self._lock:
            self._insert_locked(key, tree)
        return tree

    # --------------------------- BOOKKEEPING (lock held) --------------------------- #

    def _lookup_locked(self, key: CacheKey) -> Optional[TemplateNode]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            logger.debug("Cache entry for %s expired", key[0])
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry.tree

    def _insert_locked(self, key: CacheKey, tree: TemplateNode) -> None:
        source_id = key[0]
        if source_id != INLINE_SOURCE:
            # a new fingerprint for the same file supersedes older ones
            stale = [k for k in self._entries if k[0] == source_id and k != key]
            for k in stale:
                del self._entries[k]

        self._entries[key] = CacheEntry(tree=tree, created_at=self._clock())
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_items:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted least recently used entry %s", evicted[0])

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return self.ttl > 0 and now - entry.created_at > self.ttl

    # --------------------------- MAINTENANCE --------------------------- #

    def purge_expired(self) -> int:
        """Removes every expired entry; returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if self._expired(e, now)]
            for k in expired:
                del self._entries[k]
        return len(expired)

    def clear(self, *, disk: bool = False) -> None:
        """Drops all in-memory entries (and the disk tier if asked). Counters are kept."""
        with self._lock:
            self._entries.clear()
        if disk and self.disk is not None:
            self.disk.purge_all()
        logger.debug("Template cache cleared (disk=%s)", disk)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            stats = CacheStats(
                hits=self._hits,
                misses=self._misses,
                disk_hits=self._disk_hits,
                entries=len(self._entries),
                max_items=self.max_items,
                ttl_seconds=self.ttl,
            )
        if self.disk is not None:
            snap = self.disk.snapshot()
            stats.disk = DiskStats(
                enabled=snap.enabled,
                path=str(snap.path),
                exists=snap.exists,
                size_bytes=snap.size_bytes,
                entries=snap.entries,
            )
        return stats


__all__ = ["TemplateCache", "CacheEntry", "fingerprint", "INLINE_SOURCE"]
