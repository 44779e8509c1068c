"""
Tests for the in-memory template cache (LRU + TTL) and its disk tier.
"""

import threading

import pytest

from breeze.cache import DiskTreeCache, TemplateCache
from breeze.template.nodes import BlockNode, TextNode
from breeze.template.parser import parse_template
from tests.helpers import write


class TestInlineResolution:

    def setup_method(self):
        self.cache = TemplateCache(max_items=8, ttl=0)

    def test_hit_returns_same_tree(self):
        first = self.cache.resolve_inline("Hello {{ name }}")
        second = self.cache.resolve_inline("Hello {{ name }}")
        assert first is second
        assert first == parse_template("Hello {{ name }}")
        stats = self.cache.stats()
        assert (stats.hits, stats.misses, stats.entries) == (1, 1, 1)

    def test_different_text_is_a_miss(self):
        self.cache.resolve_inline("a")
        self.cache.resolve_inline("b")
        assert self.cache.stats().misses == 2
        assert len(self.cache) == 2

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            TemplateCache(max_items=0)
        with pytest.raises(ValueError):
            TemplateCache(ttl=-1)


class TestFileResolution:

    def test_unchanged_file_hits(self, tmp_path):
        path = write(tmp_path / "home.breeze", "Hi {{ name }}")
        cache = TemplateCache()
        first = cache.resolve_file(path)
        assert cache.resolve_file(path) is first
        assert cache.stats().hits == 1

    def test_changed_content_recompiles_and_replaces(self, tmp_path):
        path = write(tmp_path / "home.breeze", "old")
        cache = TemplateCache()
        assert cache.resolve_file(path) == BlockNode(children=(TextNode("old"),))

        write(path, "new")
        assert cache.resolve_file(path) == BlockNode(children=(TextNode("new"),))
        # the stale entry of the same file is dropped
        assert len(cache) == 1
        assert cache.stats().misses == 2

    def test_same_content_in_two_files_are_separate_entries(self, tmp_path):
        a = write(tmp_path / "a.breeze", "same")
        b = write(tmp_path / "b.breeze", "same")
        cache = TemplateCache()
        cache.resolve_file(a)
        cache.resolve_file(b)
        assert len(cache) == 2

    def test_unreadable_file(self, tmp_path):
        cache = TemplateCache()
        tree = cache.resolve_file(tmp_path / "missing.breeze")
        (node,) = tree.children
        assert isinstance(node, TextNode)
        assert "could not be read" in node.text
        assert len(cache) == 0


class TestRetention:

    def test_lru_eviction(self):
        cache = TemplateCache(max_items=2, ttl=0)
        cache.resolve_inline("a")
        cache.resolve_inline("b")
        cache.resolve_inline("a")  # a is now most recent
        cache.resolve_inline("c")  # evicts b
        assert len(cache) == 2

        misses = cache.stats().misses
        cache.resolve_inline("a")
        assert cache.stats().misses == misses
        cache.resolve_inline("b")
        assert cache.stats().misses == misses + 1

    def test_ttl_expiry(self, clock):
        cache = TemplateCache(ttl=10, clock=clock)
        first = cache.resolve_inline("x")
        clock.advance(10)
        assert cache.resolve_inline("x") is first

        clock.advance(1)
        cache.resolve_inline("x")
        assert cache.stats().misses == 2

    def test_zero_ttl_never_expires(self, clock):
        cache = TemplateCache(ttl=0, clock=clock)
        cache.resolve_inline("x")
        clock.advance(10 ** 9)
        cache.resolve_inline("x")
        assert cache.stats().hits == 1

    def test_purge_expired(self, clock):
        cache = TemplateCache(ttl=5, clock=clock)
        cache.resolve_inline("old")
        clock.advance(6)
        cache.resolve_inline("fresh")
        assert cache.purge_expired() == 1
        assert len(cache) == 1

    def test_clear_keeps_counters(self):
        cache = TemplateCache()
        cache.resolve_inline("x")
        cache.resolve_inline("x")
        cache.clear()
        stats = cache.stats()
        assert stats.entries == 0
        assert (stats.hits, stats.misses) == (1, 1)
        cache.resolve_inline("x")
        assert cache.stats().misses == 2


class TestDiskTier:

    def test_tree_shared_across_instances(self, tmp_path):
        disk = DiskTreeCache(tmp_path / "cache")
        text = "@if(a){{ b | upper }}@endif"

        first = TemplateCache(disk=disk)
        tree = first.resolve_inline(text)

        second = TemplateCache(disk=DiskTreeCache(tmp_path / "cache"))
        assert second.resolve_inline(text) == tree
        stats = second.stats()
        assert stats.misses == 1
        assert stats.disk_hits == 1

    def test_stats_report_disk(self, tmp_path):
        cache = TemplateCache(max_items=4, ttl=30, disk=DiskTreeCache(tmp_path / "cache"))
        cache.resolve_inline("x")
        dumped = cache.stats().model_dump(mode="json")
        assert dumped["max_items"] == 4
        assert dumped["ttl_seconds"] == 30.0
        assert dumped["disk"]["enabled"] is True
        assert dumped["disk"]["entries"] == 1
        assert dumped["disk"]["size_bytes"] > 0

    def test_memory_only_stats(self):
        assert TemplateCache().stats().disk is None

    def test_clear_with_disk(self, tmp_path):
        disk = DiskTreeCache(tmp_path / "cache")
        cache = TemplateCache(disk=disk)
        cache.resolve_inline("x")
        cache.clear(disk=True)
        assert disk.snapshot().entries == 0


def test_concurrent_resolution():
    cache = TemplateCache(max_items=4, ttl=0)
    texts = [f"{{{{ v{i} }}}}" for i in range(3)]
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            for text in texts:
                tree = cache.resolve_inline(text)
                with lock:
                    results.append((text, tree))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for text, tree in results:
        assert tree == parse_template(text)
    stats = cache.stats()
    assert stats.hits + stats.misses == 8 * 50 * 3
    assert stats.entries == 3
