"""Interface shared by identity providers."""

from __future__ import annotations

from typing import Protocol


class IdentityProvider(Protocol):
    """Creates, verifies and deletes login identities.

    ``create_identity`` raises IdentityExistsError for a taken email and
    IdentityError for any other rejection.
    """

    def create_identity(self, email: str, password: str) -> str:
        """Create an identity and return its ID."""
        ...

    def verify_credentials(self, email: str, password: str) -> str:
        """Return the identity ID for valid credentials."""
        ...

    def delete_identity(self, identity_id: str) -> None:
        """Delete an identity."""
        ...
