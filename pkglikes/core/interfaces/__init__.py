"""Core interfaces module."""

from .backlink_index import BacklinkIndex
from .cache_store import CacheStore
from .record_store import RecordStore

__all__ = [
    "BacklinkIndex",
    "CacheStore",
    "RecordStore",
]
