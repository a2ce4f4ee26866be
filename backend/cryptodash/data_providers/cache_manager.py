"""
Cache Manager

Process-local response cache for market data.
Entries stay readable after their TTL so callers can fall back to them
when the upstream API fails; the map is bounded by dropping the
oldest-inserted entry (not LRU).
"""
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional
from loguru import logger


@dataclass
class CacheConfig:
    """Cache configuration."""
    ttl_seconds: float = 300        # Freshness window
    max_entries: int = 20           # Ceiling before oldest-inserted eviction
    name: str = "market"


@dataclass
class CacheEntry:
    """A cached payload and when it was fetched."""
    value: Any
    fetched_at: float

    def age(self, now: float) -> float:
        return now - self.fetched_at


class ResponseCache:
    """
    TTL cache with stale reads and insertion-order eviction.

    The clock is injectable so tests can control freshness.
    Overwriting a key keeps its original insertion position.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or CacheConfig()
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}
        self._stats = {
            "hits": 0,
            "misses": 0,
            "stale_hits": 0,
            "sets": 0,
            "evictions": 0,
        }

    def get_fresh(self, key: str) -> Optional[Any]:
        """Get a value younger than the TTL, or None."""
        entry = self._entries.get(key)
        if entry is not None and entry.age(self._clock()) < self.config.ttl_seconds:
            self._stats["hits"] += 1
            return entry.value
        self._stats["misses"] += 1
        return None

    def get_stale(self, key: str) -> Optional[Any]:
        """Get a value regardless of age, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        self._stats["stale_hits"] += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value and trim the cache back under its ceiling."""
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
        self._stats["sets"] += 1
        self.evict()

    def evict(self) -> int:
        """Drop oldest-inserted entries while over the ceiling."""
        removed = 0
        while len(self._entries) > self.config.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            removed += 1
        if removed:
            self._stats["evictions"] += removed
            logger.debug(f"{self.config.name} cache: evicted {removed} entries")
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict:
        """Get cache statistics."""
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            **self._stats,
            "size": len(self._entries),
            "max_entries": self.config.max_entries,
            "ttl_seconds": self.config.ttl_seconds,
            "hit_rate": self._stats["hits"] / lookups if lookups else 0.0,
        }
