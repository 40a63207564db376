"""In-memory cache hit/miss counters since process start."""

from threading import Lock

from where_next.models import CacheStats


class CacheMetrics:
    """Aggregate hit/miss counters for the suggestion cache.

    Global aggregate only: not scoped per user or per key, never persisted.
    """

    def __init__(self) -> None:
        self._hits = 0
        self._misses = 0
        self._lock = Lock()

    def record_hit(self) -> None:
        with self._lock:
            self._hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self._misses += 1

    def get_stats(self) -> CacheStats:
        """Return a snapshot. ``hit_rate`` is 0 when nothing was recorded."""
        with self._lock:
            hits, misses = self._hits, self._misses
        total = hits + misses
        return CacheStats(
            hits=hits,
            misses=misses,
            total=total,
            hit_rate=hits / total if total else 0.0,
        )
