"""
Backend read/write exceptions.

Both are retryable: they wrap transport or storage failures of the backend,
not bad input.
"""

from .base import MonetizeProException


class FetchException(MonetizeProException):
    """Raised when reading a collection from the backend fails."""

    retryable = True

    def __init__(self, collection: str, reason: str | None = None):
        message = f"Could not load {collection}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={'collection': collection, 'reason': reason})
        self.collection = collection
        self.reason = reason


class WriteConflictException(MonetizeProException):
    """Raised when a write to the backend is rejected or fails."""

    retryable = True

    def __init__(self, collection: str, reason: str | None = None):
        message = f"Could not save {collection}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={'collection': collection, 'reason': reason})
        self.collection = collection
        self.reason = reason
