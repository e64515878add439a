"""Provider exceptions."""


class ProviderError(Exception):
    """Base exception for provider errors."""
    pass


class CacheError(ProviderError):
    """Exception raised when a cache backend cannot be set up."""
    pass


class TransientIndexError(ProviderError):
    """Exception raised when the backlink index cannot be queried."""
    pass


class RecordStoreError(ProviderError):
    """Exception raised when a record write or delete fails."""
    pass


class WriteRejectedError(RecordStoreError):
    """Exception raised when the record store refuses a write or delete."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status
