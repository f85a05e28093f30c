"""LocalBlobStore - documents written to a directory on disk."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from admitflow.storage.exceptions import UploadError

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """Blob store rooted at a local directory.

    URLs are ``public_base_url`` joined with the blob path; serving the
    directory is left to the deployment.
    """

    def __init__(self, root: Path | str, public_base_url: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise UploadError(f"Blob path escapes the store root: {path!r}")
        return self.root.joinpath(*relative.parts)

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise UploadError(f"Failed to write {path}: {e}") from e
        logger.debug("Stored %d bytes (%s) at %s", len(data), content_type, target)
        return f"{self.public_base_url}/{path}"

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        target.unlink(missing_ok=True)
