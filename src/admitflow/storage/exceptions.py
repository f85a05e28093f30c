"""Custom exceptions for blob stores."""


class StorageError(Exception):
    """Base exception for blob store errors."""


class UploadError(StorageError):
    """A blob could not be written."""
