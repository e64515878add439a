"""Cache store interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheStore(ABC):
    """Interface for key/value cache backends with per-entry TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a value from cache by key.

        Expired or missing keys return None. Implementations never raise here.

        Args:
            key: The cache key

        Returns:
            Cached value if found and fresh, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """
        Store a JSON-serializable value in cache, overwriting any previous value.

        Args:
            key: The cache key
            value: The value to cache
            ttl_seconds: Time-to-live in seconds (None keeps the entry until deleted)
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a key from cache. Missing keys are ignored.

        Args:
            key: The cache key
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the cache backend is reachable.

        Returns:
            True if backend responds, False otherwise
        """
        pass

    @abstractmethod
    def get_backend_name(self) -> str:
        """
        Get the name of the cache backend.

        Returns:
            Backend name (e.g., 'memory', 'redis')
        """
        pass

    async def close(self) -> None:
        """Release backend connections."""
        pass
