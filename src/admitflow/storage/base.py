"""Interface shared by blob stores."""

from __future__ import annotations

from typing import Protocol


class BlobStore(Protocol):
    """Stores uploaded documents and hands back a public URL."""

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Write ``data`` at ``path`` and return its URL.

        Raises:
            UploadError: If the blob could not be written
        """
        ...

    def delete(self, path: str) -> None:
        """Remove the blob at ``path``; missing blobs are ignored."""
        ...
