"""Memory record store for development and testing."""

import copy
import itertools
import logging
import time
from typing import Any, Dict, Iterator, Tuple

from ...core.entities import RecordRef
from ...core.interfaces import RecordStore
from ..exceptions import RecordStoreError

logger = logging.getLogger(__name__)

_TID_ALPHABET = "234567abcdefghijklmnopqrstuvwxyz"


def _encode_tid(value: int) -> str:
    """Encode an integer as a sortable 13 character record key."""
    chars = []
    for _ in range(13):
        chars.append(_TID_ALPHABET[value & 31])
        value >>= 5
    return "".join(reversed(chars))


class MemoryRecordStore(RecordStore):
    """Record store that keeps every repository in memory."""

    def __init__(self):
        """Initialize memory record store."""
        self._repos: Dict[str, Dict[Tuple[str, str], Dict[str, Any]]] = {}
        self._clock_id = itertools.count()
        logger.debug("MemoryRecordStore initialized")

    def _next_rkey(self) -> str:
        micros = time.time_ns() // 1000
        return _encode_tid((micros << 10) | (next(self._clock_id) & 1023))

    async def create_record(
        self, repo: str, collection: str, record: Dict[str, Any]
    ) -> str:
        if not repo:
            raise RecordStoreError("Repository DID is required")

        rkey = self._next_rkey()
        self._repos.setdefault(repo, {})[(collection, rkey)] = copy.deepcopy(record)
        ref = RecordRef(did=repo, collection=collection, rkey=rkey)
        logger.debug(f"Created record {ref.uri}")
        return ref.uri

    async def delete_record(self, repo: str, collection: str, rkey: str) -> None:
        # Deleting a missing record succeeds, as it does on a PDS
        self._repos.get(repo, {}).pop((collection, rkey), None)
        logger.debug(f"Deleted record at://{repo}/{collection}/{rkey}")

    def iter_records(self) -> Iterator[Tuple[RecordRef, Dict[str, Any]]]:
        """
        Iterate over every stored record.

        Returns:
            Iterator of (record reference, record payload) pairs
        """
        for repo, records in self._repos.items():
            for (collection, rkey), record in records.items():
                yield RecordRef(did=repo, collection=collection, rkey=rkey), record

    def count(self) -> int:
        """Get the number of stored records."""
        return sum(len(records) for records in self._repos.values())

    async def health_check(self) -> bool:
        return True
