"""SupabaseBlobStore - documents stored in a Supabase Storage bucket."""

from __future__ import annotations

import logging

import httpx

from admitflow.logging import truncate_output
from admitflow.storage.exceptions import StorageError, UploadError

logger = logging.getLogger(__name__)


class SupabaseBlobStore:
    """Blob store using the Supabase Storage object API.

    Uploads overwrite an existing object at the same path.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str = "student-documents",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the store.

        Args:
            url: Supabase project URL
            service_key: Service-role API key
            bucket: Storage bucket name
            timeout: HTTP timeout in seconds
        """
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the Storage API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=f"{self.url}/storage/v1",
                headers={
                    "apikey": self.service_key,
                    "Authorization": f"Bearer {self.service_key}",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Upload an object and return its public URL.

        Raises:
            UploadError: If Supabase rejects the upload or is unreachable
        """
        try:
            response = self.client.post(
                f"/object/{self.bucket}/{path}",
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "true"},
            )
        except httpx.HTTPError as e:
            raise UploadError(f"Storage unreachable while uploading {path}: {e}") from e

        if response.status_code not in (200, 201):
            raise UploadError(
                f"Upload of {path} failed: {response.status_code} - "
                f"{truncate_output(response.text, 500)}"
            )
        logger.debug("Uploaded %s to bucket %s", path, self.bucket)
        return self.public_url(path)

    def delete(self, path: str) -> None:
        """Delete an object.

        Raises:
            StorageError: If the delete request fails
        """
        try:
            response = self.client.delete(f"/object/{self.bucket}/{path}")
        except httpx.HTTPError as e:
            raise StorageError(f"Storage unreachable while deleting {path}: {e}") from e
        if response.status_code not in (200, 204, 404):
            raise StorageError(
                f"Delete of {path} failed: {response.status_code} - "
                f"{truncate_output(response.text, 500)}"
            )
