"""Unit tests for LocalBlobStore."""

from pathlib import Path

import pytest

from admitflow.storage import LocalBlobStore, UploadError


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs", "http://localhost:8000/files/")


@pytest.mark.unit
class TestLocalBlobStore:
    """Tests for LocalBlobStore."""

    def test_upload_writes_file(self, blob_store: LocalBlobStore, tmp_path: Path) -> None:
        """Bytes land under the root and the URL joins the base URL."""
        url = blob_store.upload("student-documents/u1/photo.png", b"png-bytes", "image/png")

        assert url == "http://localhost:8000/files/student-documents/u1/photo.png"
        stored = tmp_path / "blobs" / "student-documents" / "u1" / "photo.png"
        assert stored.read_bytes() == b"png-bytes"

    def test_upload_overwrites(self, blob_store: LocalBlobStore, tmp_path: Path) -> None:
        blob_store.upload("a/b.txt", b"one", "text/plain")
        blob_store.upload("a/b.txt", b"two", "text/plain")

        assert (tmp_path / "blobs" / "a" / "b.txt").read_bytes() == b"two"

    @pytest.mark.parametrize("path", ["../escape.png", "/etc/passwd", "a/../../b"])
    def test_upload_rejects_escaping_paths(self, blob_store: LocalBlobStore, path: str) -> None:
        with pytest.raises(UploadError):
            blob_store.upload(path, b"x", "image/png")

    def test_delete(self, blob_store: LocalBlobStore, tmp_path: Path) -> None:
        """Deleting removes the file; missing files are ignored."""
        blob_store.upload("a/b.txt", b"one", "text/plain")

        blob_store.delete("a/b.txt")
        blob_store.delete("a/b.txt")

        assert not (tmp_path / "blobs" / "a" / "b.txt").exists()
