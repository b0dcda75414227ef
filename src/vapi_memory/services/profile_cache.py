"""Bounded recency cache for backend profiles."""

from collections import OrderedDict
from collections.abc import Hashable
from datetime import datetime, timedelta, timezone
from typing import Generic, TypeVar

from vapi_memory.exceptions import ValidationError
from vapi_memory.models.context import CacheEntry, CacheEntryStats, CacheStats

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class RecencyCache(Generic[K, V]):
    """Key/value cache with LRU eviction, hit counters and age-based sweep.

    Iteration order of the underlying mapping is recency order: the first
    key is the least recently touched one. Not thread-safe.
    """

    def __init__(self, max_size: int = 100) -> None:
        """Initialize recency cache.

        Args:
            max_size: Maximum number of cache entries

        Raises:
            ValidationError: If max_size is not positive
        """
        if max_size < 1:
            raise ValidationError(f"max_size must be positive (got {max_size})")
        self.max_size = max_size
        self._entries: OrderedDict[K, CacheEntry[V]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: K) -> V | None:
        """Get a cached value and mark it most recently used.

        Args:
            key: Cache key

        Returns:
            Cached value, or None on a miss
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        entry.hits += 1
        entry.timestamp = datetime.now(timezone.utc)
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: K, value: V) -> None:
        """Store a value as the most recently used entry.

        An existing entry for the key is replaced and its hit count reset.
        When the cache is full the least recently used entry is evicted.

        Args:
            key: Cache key
            value: Value to cache
        """
        self._entries.pop(key, None)

        if len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)

        self._entries[key] = CacheEntry(value=value)

    def has(self, key: K) -> bool:
        """Check for a key without touching its recency."""
        return key in self._entries

    def delete(self, key: K) -> bool:
        """Remove an entry.

        Returns:
            True if the key was present and removed
        """
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def size(self) -> int:
        """Number of live entries."""
        return len(self._entries)

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        return list(self._entries.keys())

    def values(self) -> list[V]:
        """Values from least to most recently used."""
        return [entry.value for entry in self._entries.values()]

    def entries(self) -> list[tuple[K, CacheEntry[V]]]:
        """Key/entry pairs from least to most recently used."""
        return list(self._entries.items())

    def cleanup(self, max_age_ms: int) -> int:
        """Remove entries not touched within the given age.

        Args:
            max_age_ms: Maximum entry age in milliseconds

        Returns:
            Number of entries removed
        """
        cutoff = datetime.now(timezone.utc) - timedelta(milliseconds=max_age_ms)
        expired_keys = [
            key for key, entry in self._entries.items() if entry.timestamp < cutoff
        ]

        for key in expired_keys:
            del self._entries[key]

        return len(expired_keys)

    def get_stats(self) -> CacheStats:
        """Get cache statistics.

        The hit rate treats every free slot as a miss:
        ``hits / (hits + (max_size - size))``. It is not a per-request hit
        ratio.

        Returns:
            Cache statistics object
        """
        now = datetime.now(timezone.utc)
        total_hits = sum(entry.hits for entry in self._entries.values())
        total_access = total_hits + (self.max_size - len(self._entries))

        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            hit_rate=total_hits / total_access if total_access > 0 else 0.0,
            entries=[
                CacheEntryStats(
                    key=key,
                    hits=entry.hits,
                    age_ms=int((now - entry.timestamp).total_seconds() * 1000),
                )
                for key, entry in self._entries.items()
            ],
        )
