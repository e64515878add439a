"""Memory backlink index answering queries from a MemoryRecordStore."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from ...core.entities import RecordRef
from ...core.interfaces import BacklinkIndex
from ..records.memory_record_store import MemoryRecordStore

logger = logging.getLogger(__name__)


def _resolve_path(record: Dict[str, Any], path_field: str) -> Optional[Any]:
    """Follow a dotted path (e.g. '.subjectRef') into a record."""
    current: Any = record
    for part in path_field.strip(".").split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


class MemoryBacklinkIndex(BacklinkIndex):
    """Index over an in-memory record store, with no propagation lag."""

    def __init__(self, record_store: MemoryRecordStore):
        """
        Initialize memory index.

        Args:
            record_store: Store whose records are indexed
        """
        self._record_store = record_store

    def _matching(self, subject_ref: str, collection: str, path_field: str) -> List[RecordRef]:
        return [
            ref
            for ref, record in self._record_store.iter_records()
            if ref.collection == collection
            and _resolve_path(record, path_field) == subject_ref
        ]

    async def count_distinct_writers(
        self, subject_ref: str, collection: str, path_field: str
    ) -> int:
        return len({ref.did for ref in self._matching(subject_ref, collection, path_field)})

    async def find_writer_records(
        self,
        subject_ref: str,
        collection: str,
        path_field: str,
        writer_dids: Iterable[str],
    ) -> List[RecordRef]:
        dids = set(writer_dids)
        return [
            ref
            for ref in self._matching(subject_ref, collection, path_field)
            if ref.did in dids
        ]

    async def health_check(self) -> bool:
        return True
