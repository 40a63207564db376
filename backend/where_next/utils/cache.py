"""In-memory TTL cache with bounded size.

Simple process-level cache for hot data (suggestion responses).
Survives across requests in the same uvicorn worker.
TTL: 1h by default (suggestions are seasonal, not real-time). Max 50 entries.

Eviction is by insertion order: when the cache is full, the entry that was
inserted (or last replaced) longest ago is dropped. Reads do not reorder.
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and its lifetime."""
    key: str
    value: Any
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """TTL-aware, size-bounded cache keyed by string.

    A single lock guards the whole map because lazy eviction mutates
    state during reads.
    """

    def __init__(
        self,
        max_size: int = 50,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry is not None else None

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Insert or fully replace ``key``.

        Args:
            key: The cache key to store under.
            value: The value to cache.
            ttl_seconds: Per-entry TTL. Uses the cache default if not specified.

        Raises:
            ValueError: If ``ttl_seconds`` is not positive.
        """
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(
                key=key, value=value, created_at=now, expires_at=now + ttl
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def default_ttl(self) -> float:
        """Get the default TTL in seconds."""
        return self._ttl

    def _live_entry(self, key: str) -> CacheEntry | None:
        # Caller holds the lock.
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry
