"""Backlink index interface."""

from abc import ABC, abstractmethod
from typing import Iterable, List

from ..entities import RecordRef


class BacklinkIndex(ABC):
    """Abstract interface for the remote index of records linking to a subject.

    The index is eventually consistent: a record written moments ago may not
    be reflected yet.
    """

    @abstractmethod
    async def count_distinct_writers(
        self, subject_ref: str, collection: str, path_field: str
    ) -> int:
        """
        Count distinct writers with a record linking to the subject.

        Args:
            subject_ref: Subject reference the records point at
            collection: Collection the records belong to
            path_field: Field of the record holding the reference

        Returns:
            Total number of distinct writer identities

        Raises:
            TransientIndexError: If the index cannot be queried
        """
        pass

    @abstractmethod
    async def find_writer_records(
        self,
        subject_ref: str,
        collection: str,
        path_field: str,
        writer_dids: Iterable[str],
    ) -> List[RecordRef]:
        """
        Find records linking to the subject written by specific writers.

        Args:
            subject_ref: Subject reference the records point at
            collection: Collection the records belong to
            path_field: Field of the record holding the reference
            writer_dids: Writer identities to restrict the query to

        Returns:
            List of matching record references (possibly empty)

        Raises:
            TransientIndexError: If the index cannot be queried
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the index service is healthy and accessible.

        Returns:
            True if service is healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release HTTP resources."""
        pass
