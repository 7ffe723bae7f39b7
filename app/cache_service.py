"""
In-process TTL cache for the article groups pipeline
Holds the layout registry, the classified items scan and the table-existence
probe under fixed names, each with its own expiry
"""

import time
import threading
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from constants import LAYOUT_CACHE_KEY, ITEMS_CACHE_KEY, TABLE_CACHE_KEY
from metrics import cache_requests_total

logger = logging.getLogger("main")


class TTLCache:
    """Named entries with absolute expiry timestamps taken from an injected clock"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        # Key: name -> Value: (value, expires_at)
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
        }

    def get(self, name: str, default: Any = None) -> Any:
        """
        Get a value if it has not expired

        Args:
            name: Cache entry name
            default: Returned on miss or expiry

        Returns:
            Cached value or default
        """
        now = self.clock()
        with self._lock:
            entry = self._entries.get(name)
            if entry is not None:
                value, expires_at = entry
                if now < expires_at:
                    self._stats["hits"] += 1
                    cache_requests_total.labels(cache=name, result="hit").inc()
                    logger.debug(f"Cache HIT: {name}")
                    return value
                # Cache expired
                del self._entries[name]
            self._stats["misses"] += 1
        cache_requests_total.labels(cache=name, result="miss").inc()
        logger.debug(f"Cache MISS: {name}")
        return default

    def set(self, name: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[name] = (value, self.clock() + ttl)
            self._stats["sets"] += 1
        logger.debug(f"Cache SET: {name} (TTL: {ttl}s)")

    def invalidate(self, name: str) -> bool:
        with self._lock:
            existed = self._entries.pop(name, None) is not None
            if existed:
                self._stats["deletes"] += 1
        if existed:
            logger.debug(f"Cache DELETE: {name}")
        return existed

    def ttl_remaining(self, name: str) -> Optional[float]:
        with self._lock:
            entry = self._entries.get(name)
        if entry is None:
            return None
        remaining = entry[1] - self.clock()
        return remaining if remaining > 0 else None

    def stats(self) -> Dict:
        """Get cache statistics (hits, misses, sets, deletes) and live entries"""
        with self._lock:
            names = list(self._entries.keys())
            stats = {**self._stats}
        return {
            **stats,
            "entries": {name: self.ttl_remaining(name) for name in names},
        }


def clear_pipeline_caches(cache: TTLCache) -> Dict[str, bool]:
    """
    Force-clear the layout, items and table-existence entries

    Returns:
        Mapping of cache name to whether an entry was present
    """
    cleared = {name: cache.invalidate(name) for name in (LAYOUT_CACHE_KEY, ITEMS_CACHE_KEY, TABLE_CACHE_KEY)}
    logger.info(f"Pipeline caches cleared: {cleared}")
    return cleared
