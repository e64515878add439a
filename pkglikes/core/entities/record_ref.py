"""Record reference entity."""

from dataclasses import dataclass

from ..exceptions import MalformedRecordIdentifierError

AT_URI_SCHEME = "at://"


@dataclass(frozen=True)
class RecordRef:
    """Address of one record in a writer's repository.

    Used both for records returned by the backlink index and for the shadow
    record remembered right after a like is written.
    """

    did: str
    collection: str
    rkey: str

    def __post_init__(self):
        """Validate record reference data."""
        if not self.did or not self.did.strip():
            raise ValueError("Record DID cannot be empty")
        if not self.collection or not self.collection.strip():
            raise ValueError("Record collection cannot be empty")
        if not self.rkey or not self.rkey.strip():
            raise ValueError("Record key cannot be empty")

    @property
    def uri(self) -> str:
        """Get the at:// URI of the record."""
        return f"{AT_URI_SCHEME}{self.did}/{self.collection}/{self.rkey}"

    @classmethod
    def from_uri(cls, uri: str) -> "RecordRef":
        """
        Parse an at:// URI into a record reference.

        Args:
            uri: URI of the form at://<did>/<collection>/<rkey>

        Returns:
            RecordRef instance

        Raises:
            MalformedRecordIdentifierError: If the URI has no DID, collection or rkey
        """
        if not uri or not uri.startswith(AT_URI_SCHEME):
            raise MalformedRecordIdentifierError(uri)

        parts = uri[len(AT_URI_SCHEME):].split("/")
        if len(parts) != 3 or not all(part.strip() for part in parts):
            raise MalformedRecordIdentifierError(uri)

        did, collection, rkey = parts
        return cls(did=did, collection=collection, rkey=rkey)

    def to_dict(self) -> dict:
        """
        Convert record reference to dictionary for serialization.

        Returns:
            Dictionary representation of the record reference
        """
        return {"did": self.did, "collection": self.collection, "rkey": self.rkey}

    @classmethod
    def from_dict(cls, data: dict) -> "RecordRef":
        """
        Create record reference from dictionary.

        Args:
            data: Dictionary with record reference data

        Returns:
            RecordRef instance
        """
        return cls(did=data["did"], collection=data["collection"], rkey=data["rkey"])
