"""
Custom exceptions for the document layer.
"""


class KVDocsError(Exception):
    """Base class for all errors raised by kvdocs."""


class StorageFailure(KVDocsError):
    """
    Raised when the underlying key-value store fails.

    Covers I/O errors, connection-level errors and operations attempted
    on a closed store. The original exception is chained as __cause__.
    """

    def __init__(self, operation: str, message: str):
        """
        Initialize storage failure.

        Args:
            operation: Name of the store operation that failed (put, get, ...).
            message: Human readable description of the failure.
        """
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class StoreClosedError(StorageFailure):
    """Raised when an operation is attempted after the store was closed."""

    def __init__(self, operation: str):
        super().__init__(operation, "store is closed")


class DecodeFailure(KVDocsError):
    """
    Raised when stored bytes cannot be parsed back into a document or key.

    This is a fail-fast error: a scan that meets an undecodable value
    stops instead of skipping it.
    """

    def __init__(self, message: str, key: bytes | None = None):
        """
        Initialize decode failure.

        Args:
            message: Description of what could not be decoded.
            key: Raw storage key of the offending entry, when known.
        """
        self.key = key
        super().__init__(message)
