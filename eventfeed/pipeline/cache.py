import copy
import time

from eventfeed import config


def cache_key(params):
    """Stable key for a SearchParams; equivalent searches share a key."""
    def coord(value):
        return None if value is None else round(value, 4)

    return (
        (params.keyword or "").strip().lower(),
        (params.location or "").strip().lower(),
        coord(params.latitude),
        coord(params.longitude),
        round(params.radius or 0, 2),
        params.start_date,
        params.end_date,
        tuple(sorted(params.categories or [])),
        params.limit,
        params.page,
        tuple(sorted(params.exclude_ids or [])),
    )


class SearchCache:
    """
    In-memory response cache with a fixed TTL.
    Stores and returns deep copies so callers can't mutate cached responses.
    """

    def __init__(self, ttl_seconds=config.CACHE_TTL_SECONDS, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries = {}
        self.hits = 0
        self.misses = 0

    def get(self, params):
        key = cache_key(params)
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        stored_at, response = entry
        if self.clock() - stored_at > self.ttl_seconds:
            del self._entries[key]
            self.misses += 1
            return None

        self.hits += 1
        return copy.deepcopy(response)

    def set(self, params, response):
        self._prune()
        self._entries[cache_key(params)] = (self.clock(), copy.deepcopy(response))

    def clear(self):
        self._entries.clear()

    def stats(self):
        return {"size": len(self._entries), "hits": self.hits, "misses": self.misses}

    def _prune(self):
        now = self.clock()
        expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds]
        for key in expired:
            del self._entries[key]

    def __len__(self):
        return len(self._entries)
