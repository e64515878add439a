"""Record store interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class RecordStore(ABC):
    """Abstract interface for writing records to a user's repository."""

    @abstractmethod
    async def create_record(
        self, repo: str, collection: str, record: Dict[str, Any]
    ) -> str:
        """
        Create a record in a repository.

        Args:
            repo: DID of the repository owner (the caller)
            collection: Collection to write into
            record: Record payload

        Returns:
            at:// URI of the created record

        Raises:
            WriteRejectedError: If the store refuses the write
            RecordStoreError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_record(self, repo: str, collection: str, rkey: str) -> None:
        """
        Delete a record from a repository.

        Args:
            repo: DID of the repository owner (the caller)
            collection: Collection of the record
            rkey: Record key

        Raises:
            WriteRejectedError: If the store refuses the delete
            RecordStoreError: If the delete fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the record store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release HTTP resources."""
        pass
