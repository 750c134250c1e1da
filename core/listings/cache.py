"""
Query Cache - Short-Lived In-Process Cache for Listing Queries

Caches filter-keyed listing query results. Entries expire after a TTL
(5 minutes by default) and whole key families are dropped with
invalidate_prefix() whenever the underlying rows change.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Final, Optional


logger = logging.getLogger(__name__)


DEFAULT_TTL_SECONDS: Final[float] = 5 * 60
DEFAULT_MAX_SIZE: Final[int] = 1000
EVICTION_FRACTION: Final[float] = 0.1


@dataclass
class CacheEntry:
    """A cached value with its expiry and hit count."""
    data: Any
    expiry: float
    hits: int = 0


class QueryCache:
    """
    Thread-safe TTL cache.

    When the cache is full, expired entries are purged first; if it is
    still full the least-hit tenth of the entries is evicted.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()

    # =========================================================================
    # Key Construction
    # =========================================================================

    @staticmethod
    def create_key(prefix: str, params: dict[str, Any]) -> str:
        """
        Build a deterministic key from a prefix and parameters.

        Parameters are sorted by name and rendered as name:value pairs
        joined with '|'.
        """
        rendered = "|".join(f"{name}:{params[name]}" for name in sorted(params))
        return f"{prefix}:{rendered}"

    # =========================================================================
    # Operations
    # =========================================================================

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expiry:
                del self._entries[key]
                return None
            entry.hits += 1
            return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store a value for ttl seconds (default TTL when omitted)."""
        with self._lock:
            if len(self._entries) >= self._max_size:
                self._cleanup()
            expiry = self._clock() + (ttl if ttl is not None else self._default_ttl)
            self._entries[key] = CacheEntry(data=data, expiry=expiry)

    def has(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if self._clock() > entry.expiry:
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def invalidate_prefix(self, prefix: str) -> int:
        """
        Drop every entry whose key starts with prefix.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cache entries for prefix %r", len(doomed), prefix)
        return len(doomed)

    def stats(self) -> dict:
        """Summarise cache size and hit counts."""
        with self._lock:
            now = self._clock()
            valid = [entry for entry in self._entries.values() if now <= entry.expiry]
            total_hits = sum(entry.hits for entry in valid)
            return {
                "size": len(self._entries),
                "valid_entries": len(valid),
                "total_hits": total_hits,
                "hit_rate": round(total_hits / len(valid), 2) if valid else 0,
            }

    # =========================================================================
    # Internal
    # =========================================================================

    def _cleanup(self) -> None:
        """Purge expired entries, then evict the least-hit ones. Caller holds the lock."""
        now = self._clock()
        for key in [k for k, entry in self._entries.items() if now > entry.expiry]:
            del self._entries[key]

        if len(self._entries) >= self._max_size:
            by_hits = sorted(self._entries.items(), key=lambda item: item[1].hits)
            evict_count = max(1, int(self._max_size * EVICTION_FRACTION))
            for key, _ in by_hits[:evict_count]:
                del self._entries[key]
