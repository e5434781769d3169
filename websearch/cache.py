"""TTL cache for aggregated search results."""

import time
from collections.abc import Callable

from utils.logger import get_logger

from .contracts import AggregatedResult, CacheEntry

logger = get_logger(__name__)

KEY_PREFIX = "query_"


def _now_ms() -> int:
    return int(time.time() * 1000)


class ResultCache:
    """
    In-memory cache of aggregated results keyed by query.

    Expiry is lazy: an entry is checked against the lifetime when it is read
    and evicted then. Nothing sweeps expired entries in the background.

    Methods are coroutines so a persistent store can replace the dict without
    changing callers. No lock is taken: the pipeline runs on one event loop
    and two cycles missing on the same query just both write the same value.
    """

    def __init__(self, lifetime_seconds: int, clock: Callable[[], int] = _now_ms):
        """
        Initialize cache.

        Args:
            lifetime_seconds: How long an entry stays valid
            clock: Returns the current time in epoch milliseconds
        """
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock
        self.lifetime_seconds = lifetime_seconds

    @staticmethod
    def make_key(query: str) -> str:
        return KEY_PREFIX + query

    def _is_expired(self, entry: CacheEntry, lifetime_seconds: int) -> bool:
        return self._clock() - entry.timestamp_ms >= lifetime_seconds * 1000

    async def get(
        self, query: str, lifetime_seconds: int | None = None
    ) -> AggregatedResult | None:
        """
        Get a cached result if present and not expired.

        Args:
            query: Search query (case-sensitive)
            lifetime_seconds: Overrides the lifetime for this read (settings hot reload)

        Returns:
            Cached result, or None on a miss
        """
        key = self.make_key(query)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if lifetime_seconds is None:
            lifetime_seconds = self.lifetime_seconds

        if not isinstance(entry, CacheEntry) or self._is_expired(entry, lifetime_seconds):
            logger.debug(f"Cached result for '{query}' is expired, evicting")
            del self._entries[key]
            return None

        return entry.result

    async def set(self, query: str, result: AggregatedResult) -> None:
        self._entries[self.make_key(query)] = CacheEntry(result=result, timestamp_ms=self._clock())

    async def clear(self) -> None:
        """Remove every entry, expired or not."""
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Search cache cleared ({count} entries)")

    def __len__(self) -> int:
        return len(self._entries)
