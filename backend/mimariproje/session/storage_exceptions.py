"""Custom exceptions for the session storage module."""


class StorageError(Exception):
    """Raised when the underlying storage database cannot be read or written."""


class StorageClosedError(StorageError):
    """Raised when an operation is attempted after the storage was closed."""
