"""Blob stores for uploaded registration documents."""

from admitflow.storage.base import BlobStore
from admitflow.storage.exceptions import StorageError, UploadError
from admitflow.storage.local import LocalBlobStore
from admitflow.storage.supabase import SupabaseBlobStore

__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "StorageError",
    "SupabaseBlobStore",
    "UploadError",
]
