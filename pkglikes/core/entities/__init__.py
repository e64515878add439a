"""Core entities module."""

from .package_likes import PackageLikes
from .record_ref import RecordRef

__all__ = [
    "PackageLikes",
    "RecordRef",
]
