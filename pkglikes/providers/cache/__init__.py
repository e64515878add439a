"""Cache providers module."""

from .memory_cache_provider import MemoryCacheProvider
from .redis_cache_provider import RedisCacheProvider

__all__ = ["MemoryCacheProvider", "RedisCacheProvider"]
