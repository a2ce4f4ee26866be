"""
Unit Tests - Response Cache
"""
import pytest

from cryptodash.data_providers.cache_manager import CacheConfig, ResponseCache


@pytest.fixture
def cache(clock) -> ResponseCache:
    return ResponseCache(CacheConfig(ttl_seconds=300, max_entries=3), clock=clock)


class TestFreshness:
    """Tests for TTL handling."""

    def test_miss(self, cache):
        assert cache.get_fresh("k") is None
        assert cache.get_stale("k") is None

    def test_fresh_within_ttl(self, cache, clock):
        cache.set("k", {"v": 1})
        clock.advance(299)
        assert cache.get_fresh("k") == {"v": 1}

    def test_stale_at_ttl(self, cache, clock):
        cache.set("k", {"v": 1})
        clock.advance(300)
        assert cache.get_fresh("k") is None
        assert cache.get_stale("k") == {"v": 1}

    def test_overwrite_refreshes_timestamp(self, cache, clock):
        cache.set("k", 1)
        clock.advance(250)
        cache.set("k", 2)
        clock.advance(250)
        assert cache.get_fresh("k") == 2


class TestEviction:
    """Tests for the insertion-order ceiling."""

    def test_oldest_inserted_is_dropped(self, cache):
        for key in ("a", "b", "c", "d"):
            cache.set(key, key)
        assert len(cache) == 3
        assert "a" not in cache
        assert all(k in cache for k in ("b", "c", "d"))

    def test_reads_do_not_protect_entries(self, cache):
        """Insertion order, not LRU."""
        for key in ("a", "b", "c"):
            cache.set(key, key)
        cache.get_fresh("a")
        cache.set("d", "d")
        assert "a" not in cache

    def test_overwrite_keeps_insertion_position(self, cache):
        for key in ("a", "b", "c"):
            cache.set(key, key)
        cache.set("a", "a2")
        cache.set("d", "d")
        assert "a" not in cache
        assert "b" in cache


class TestStats:
    """Tests for cache statistics."""

    def test_counts(self, cache, clock):
        cache.get_fresh("k")
        cache.set("k", 1)
        cache.get_fresh("k")
        clock.advance(301)
        cache.get_stale("k")
        for key in ("a", "b", "c"):
            cache.set(key, key)

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["stale_hits"] == 1
        assert stats["sets"] == 4
        assert stats["evictions"] == 1
        assert stats["size"] == 3
        assert stats["hit_rate"] == pytest.approx(0.5)

    def test_clear(self, cache):
        cache.set("k", 1)
        cache.clear()
        assert len(cache) == 0
