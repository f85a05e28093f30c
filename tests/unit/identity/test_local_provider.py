"""Unit tests for LocalIdentityProvider."""

import pytest

from admitflow.identity import (
    IdentityError,
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
    LocalIdentityProvider,
)
from admitflow.registry import Identity, RegistryStore


@pytest.fixture
def provider(store: RegistryStore) -> LocalIdentityProvider:
    """Create a LocalIdentityProvider sharing the store's database."""
    return LocalIdentityProvider(store.database)


@pytest.mark.unit
class TestLocalIdentityProvider:
    """Tests for LocalIdentityProvider."""

    def test_create_and_verify(self, provider: LocalIdentityProvider) -> None:
        """Verification returns the created identity ID."""
        identity_id = provider.create_identity("Ada@Example.com", "Secure123")

        assert provider.verify_credentials("ada@example.com", "Secure123") == identity_id

    def test_password_is_hashed(
        self, provider: LocalIdentityProvider, store: RegistryStore
    ) -> None:
        identity_id = provider.create_identity("ada@example.com", "Secure123")

        session = store.database.get_session()
        try:
            identity = session.get(Identity, identity_id)
            assert identity is not None
            assert identity.password_hash != "Secure123"
            assert "Secure123" not in identity.password_hash
        finally:
            session.close()

    def test_duplicate_email(self, provider: LocalIdentityProvider) -> None:
        provider.create_identity("ada@example.com", "Secure123")

        with pytest.raises(IdentityExistsError):
            provider.create_identity("ADA@example.com", "Other123")

    def test_wrong_password(self, provider: LocalIdentityProvider) -> None:
        provider.create_identity("ada@example.com", "Secure123")

        with pytest.raises(InvalidCredentialsError):
            provider.verify_credentials("ada@example.com", "secure123")

    def test_unknown_email(self, provider: LocalIdentityProvider) -> None:
        with pytest.raises(InvalidCredentialsError):
            provider.verify_credentials("nobody@example.com", "Secure123")

    def test_delete_identity(self, provider: LocalIdentityProvider) -> None:
        """Deleted identities can't log in and can't be deleted twice."""
        identity_id = provider.create_identity("ada@example.com", "Secure123")

        provider.delete_identity(identity_id)

        with pytest.raises(InvalidCredentialsError):
            provider.verify_credentials("ada@example.com", "Secure123")
        with pytest.raises(IdentityNotFoundError):
            provider.delete_identity(identity_id)

    def test_database_failure_is_identity_error(
        self, provider: LocalIdentityProvider, store: RegistryStore
    ) -> None:
        identity_id = provider.create_identity("ada@example.com", "Secure123")
        Identity.__table__.drop(store.database.engine)

        with pytest.raises(IdentityError):
            provider.delete_identity(identity_id)
        with pytest.raises(IdentityError):
            provider.create_identity("bola@example.com", "Secure123")
