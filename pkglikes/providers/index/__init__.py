"""Backlink index providers module."""

from .constellation_index import ConstellationIndex
from .memory_index import MemoryBacklinkIndex

__all__ = ["ConstellationIndex", "MemoryBacklinkIndex"]
