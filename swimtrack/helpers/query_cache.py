import json
import logging
import time

from flask import current_app

logger = logging.getLogger(__name__)

_MISSING = object()


class QueryCache:
    """
    Small TTL cache for query results.

    One instance per app (app.extensions["query_cache"]); nothing is shared at
    module level, so tests and scripts can build their own.
    """

    def __init__(self, ttl: float = 300.0, clock=time.time):
        self.ttl = ttl
        self._clock = clock
        # key -> (value, expires_at)
        self._entries: dict = {}
        self.hits = 0
        self.misses = 0
        self.sets = 0

    @staticmethod
    def make_key(operation: str, params=None) -> str:
        return f"{operation}:{json.dumps(params, sort_keys=True, default=str)}"

    def get(self, key, default=None):
        entry = self._entries.get(key)
        if entry is None:
            return default

        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return default

        return value

    def set(self, key, value, ttl=None):
        self._entries[key] = (value, self._clock() + (self.ttl if ttl is None else ttl))
        self.sets += 1

    def get_or_set(self, key, loader, ttl=None, force_refresh=False):
        """Return the cached value for key, or call loader() and cache its result."""
        if not force_refresh:
            value = self.get(key, _MISSING)
            if value is not _MISSING:
                self.hits += 1
                return value

        self.misses += 1
        value = loader()
        self.set(key, value, ttl)
        return value

    def invalidate(self, pattern: str) -> int:
        """Drop every key containing `pattern`. Returns how many were dropped."""
        keys = [k for k in self._entries if pattern in k]
        for k in keys:
            self._entries.pop(k, None)
        if keys:
            logger.debug("[CACHE] invalidated %d key(s) matching %r", len(keys), pattern)
        return len(keys)

    def clear(self):
        self._entries.clear()

    def stats(self) -> dict:
        lookups = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "keys": len(self._entries),
            "hit_rate": (self.hits / lookups * 100) if lookups else 0.0,
        }


def get_query_cache() -> QueryCache:
    return current_app.extensions["query_cache"]
