"""SupabaseIdentityProvider - identities held by Supabase Auth (GoTrue)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from admitflow.identity.exceptions import (
    IdentityError,
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
)
from admitflow.logging import truncate_output

logger = logging.getLogger(__name__)

# GoTrue error codes meaning the email is already registered
_DUPLICATE_CODES = {"email_exists", "user_already_exists"}


class SupabaseIdentityProvider:
    """Identity provider using the Supabase Auth admin API.

    Requires the service-role key; identities are created already confirmed.
    """

    def __init__(self, url: str, service_key: str, timeout: float = 30.0) -> None:
        """Initialize the provider.

        Args:
            url: Supabase project URL, e.g. "https://abc.supabase.co"
            service_key: Service-role API key
            timeout: HTTP timeout in seconds
        """
        self.url = url.rstrip("/")
        self.service_key = service_key
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the Auth API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=f"{self.url}/auth/v1",
                headers={
                    "apikey": self.service_key,
                    "Authorization": f"Bearer {self.service_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def create_identity(self, email: str, password: str) -> str:
        """Create a confirmed user.

        Raises:
            IdentityExistsError: If the email is already registered
            IdentityError: If Supabase rejects the request
        """
        response = self._request(
            "POST",
            "/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
        )

        if response.status_code in (200, 201):
            body: dict[str, Any] = response.json()
            user = body.get("user", body)
            logger.info("Created Supabase identity %s", user["id"])
            return str(user["id"])

        error = _error_body(response)
        message = str(error.get("msg") or error.get("message") or response.text)
        if error.get("error_code") in _DUPLICATE_CODES or "already been registered" in message:
            raise IdentityExistsError(f"Identity for '{email}' already exists")
        raise IdentityError(
            f"Create user failed: {response.status_code} - {truncate_output(message, 500)}"
        )

    def verify_credentials(self, email: str, password: str) -> str:
        """Exchange email and password for a session and return the user ID.

        Raises:
            InvalidCredentialsError: If the credentials are rejected
            IdentityError: If the request fails for another reason
        """
        response = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code == 200:
            return str(response.json()["user"]["id"])
        if response.status_code in (400, 401):
            raise InvalidCredentialsError("Invalid email or password")
        raise IdentityError(
            f"Token request failed: {response.status_code} - "
            f"{truncate_output(response.text, 500)}"
        )

    def delete_identity(self, identity_id: str) -> None:
        """Delete a user.

        Raises:
            IdentityNotFoundError: If the user doesn't exist
            IdentityError: If the request fails for another reason
        """
        response = self._request("DELETE", f"/admin/users/{identity_id}")
        if response.status_code == 404:
            raise IdentityNotFoundError(f"Identity with id '{identity_id}' not found")
        if response.status_code not in (200, 204):
            raise IdentityError(
                f"Delete user failed: {response.status_code} - "
                f"{truncate_output(response.text, 500)}"
            )
        logger.info("Deleted Supabase identity %s", identity_id)

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise IdentityError(f"Supabase Auth unreachable: {e}") from e


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
