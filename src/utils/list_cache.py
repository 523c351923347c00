"""Cache module for list query results.

This module provides an in-process cache for paginated listings. Entries
expire after a fixed time and are grouped into namespaces so that a write can
drop every cached page of a listing at once.
"""

import hashlib
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class ListCache:
    """In-memory, thread-safe cache with per-entry expiry.

    Each namespace keeps an explicit index of the keys stored under it, so
    ``forget_namespace`` removes exactly those entries instead of matching
    key patterns.
    """

    def __init__(self, max_size: int = 500, clock: Callable[[], float] = time.monotonic):
        """Initialize ListCache.

        Args:
            max_size: Maximum number of cached entries. Defaults to 500.
            clock: Time source in seconds, replaceable in tests.
        """
        self._cache: Dict[str, Tuple[float, Any]] = {}
        self._namespaces: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()
        self._max_size = max_size
        self._clock = clock
        logger.info("ListCache initialized (max_size=%d)", max_size)

    @staticmethod
    def make_key(namespace: str, *parts: Any, search_term: str = "") -> str:
        """Build a cache key from listing parameters.

        The search term is hashed so keys stay short and free of user text.

        Example:
            >>> ListCache.make_key("books", 1, 10, search_term="")
            'books:1:10:d41d8cd98f00b204e9800998ecf8427e'
        """
        search_hash = hashlib.md5(search_term.encode("utf-8")).hexdigest()
        return ":".join([namespace, *(str(p) for p in parts), search_hash])

    def _evict_oldest(self) -> None:
        """Evict the oldest entry when the cache is full."""
        if self._cache:
            oldest_key = next(iter(self._cache))
            self._drop(oldest_key)
            logger.debug("Evicted cache entry: %s", oldest_key)

    def _drop(self, key: str) -> None:
        self._cache.pop(key, None)
        namespace = key.split(":", 1)[0]
        keys = self._namespaces.get(namespace)
        if keys is not None:
            keys.discard(key)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for ``key`` or None if missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                logger.debug("Cache miss: %s", key)
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                self._drop(key)
                logger.debug("Cache expired: %s", key)
                return None
            logger.debug("Cache hit: %s", key)
            return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""
        namespace = key.split(":", 1)[0]
        with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_size:
                self._evict_oldest()
            self._cache[key] = (self._clock() + ttl_seconds, value)
            self._namespaces.setdefault(namespace, set()).add(key)

    def remember(self, key: str, ttl_seconds: float, factory: Callable[[], Any]) -> Any:
        """Return the cached value, computing and storing it on a miss.

        Args:
            key: Cache key; its namespace is the text before the first ':'.
            ttl_seconds: Lifetime of a freshly computed entry.
            factory: Callable producing the value on a miss.

        Returns:
            The cached or freshly computed value.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = factory()
        self.set(key, value, ttl_seconds)
        return value

    def forget_namespace(self, namespace: str) -> int:
        """Drop every entry stored under ``namespace``.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            keys = self._namespaces.pop(namespace, set())
            for key in keys:
                self._cache.pop(key, None)
        if keys:
            logger.info("Invalidated %d cached '%s' listings", len(keys), namespace)
        return len(keys)

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._namespaces.clear()
            logger.info("Cache cleared (%d entries removed)", count)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics.
        """
        with self._lock:
            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "namespaces": {ns: len(keys) for ns, keys in self._namespaces.items()},
            }


# Global cache instance (shared across requests)
_global_cache: Optional[ListCache] = None
_cache_lock = threading.Lock()


def get_list_cache() -> ListCache:
    """Get global cache instance (singleton pattern).

    Returns:
        Global ListCache instance.
    """
    global _global_cache
    if _global_cache is None:
        with _cache_lock:
            if _global_cache is None:
                _global_cache = ListCache()
    return _global_cache
