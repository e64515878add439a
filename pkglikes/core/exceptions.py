"""Core exceptions."""


class LikesError(Exception):
    """Base exception for like coordination errors."""
    pass


class MalformedRecordIdentifierError(LikesError):
    """Exception raised when a record URI cannot be split into its parts."""

    def __init__(self, uri: str):
        super().__init__(f"Invalid record URI given: {uri}")
        self.uri = uri
