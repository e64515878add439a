"""Record store providers module."""

from .atproto_record_store import AtprotoRecordStore
from .memory_record_store import MemoryRecordStore

__all__ = ["AtprotoRecordStore", "MemoryRecordStore"]
