"""In-process cache provider for single-node and development use."""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ...core.interfaces import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL = 1000


@dataclass
class CacheEntry:
    """One stored value with its expiry metadata."""

    value: str  # JSON-encoded
    ttl_seconds: Optional[int]
    cached_at_ms: float

    def is_stale(self, now_ms: float) -> bool:
        """Check if the entry has outlived its TTL."""
        if not self.ttl_seconds:
            return False
        return now_ms > self.cached_at_ms + self.ttl_seconds * 1000


class MemoryCacheProvider(CacheStore):
    """Cache provider keeping entries in a process-local dictionary.

    Values are stored JSON-encoded so callers see the same shapes the Redis
    provider returns.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sweep_interval: int = DEFAULT_SWEEP_INTERVAL,
    ):
        """
        Initialize memory cache provider.

        Args:
            clock: Returns the current wall-clock time in seconds
            sweep_interval: Drop all stale entries after this many writes (0 disables)
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._writes_since_sweep = 0
        logger.debug("Memory cache provider initialized")

    def _now_ms(self) -> float:
        return self._clock() * 1000

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry.is_stale(self._now_ms()):
            self._entries.pop(key, None)
            return None

        return json.loads(entry.value)

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        self._entries[key] = CacheEntry(
            value=json.dumps(value),
            ttl_seconds=ttl_seconds,
            cached_at_ms=self._now_ms(),
        )

        self._writes_since_sweep += 1
        if self._sweep_interval and self._writes_since_sweep >= self._sweep_interval:
            self.purge_expired()

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """
        Drop every stale entry, including keys that are never read again.

        Returns:
            Number of entries removed
        """
        self._writes_since_sweep = 0
        now_ms = self._now_ms()
        stale = [key for key, entry in self._entries.items() if entry.is_stale(now_ms)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Purged {len(stale)} expired cache entries")
        return len(stale)

    def size(self) -> int:
        """
        Get number of fresh entries in cache.

        Returns:
            Number of entries that have not expired
        """
        now_ms = self._now_ms()
        return sum(1 for entry in self._entries.values() if not entry.is_stale(now_ms))

    async def health_check(self) -> bool:
        return True

    def get_backend_name(self) -> str:
        return "memory"
