"""
Query Cache

In-memory memoization for read-only node queries (object listing, gas price,
dry run, alias resolution). Entries expire after a TTL and the whole cache is
invalidated after any submission and on wallet teardown.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Tuple

from loguru import logger


class QueryCache:
    """
    TTL memoization owned by one wallet

    Features:
    - Per-key expiry
    - Explicit invalidate() hook
    """

    def __init__(self, ttl_seconds: float = 60.0):
        """
        Initialize cache

        Args:
            ttl_seconds: Entry lifetime; 0 disables caching
        """
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def __len__(self):
        return len(self._entries)

    async def get_or_fetch(self, key: Hashable, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for key, or await fetch() and cache it

        Args:
            key: Hashable cache key
            fetch: Coroutine factory producing the value

        Returns:
            Cached or freshly fetched value
        """
        now = time.monotonic()
        entry = self._entries.get(key)
        if entry is not None and entry[0] > now:
            logger.debug(f"Cache hit: {key[0] if isinstance(key, tuple) else key}")
            return entry[1]

        value = await fetch()
        if self.ttl_seconds > 0:
            self._entries[key] = (now + self.ttl_seconds, value)
        return value

    def invalidate(self):
        """Drop every entry"""
        if self._entries:
            logger.debug(f"Invalidating {len(self._entries)} cached queries")
        self._entries.clear()
