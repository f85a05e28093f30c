"""Unit tests for PortalAccessGuard."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from admitflow.approval import (
    PENDING_MESSAGE,
    ApprovalPendingError,
    InvalidLoginError,
    PortalAccessDeniedError,
    PortalAccessGuard,
    RegistrationRejectedError,
)
from admitflow.identity import IdentityError, InvalidCredentialsError
from admitflow.registry import ApprovalStatus, Registration, RegistryStore


@pytest.fixture
def identity_provider() -> MagicMock:
    """Identity provider accepting any password for user-1."""
    provider = MagicMock()
    provider.verify_credentials.return_value = "user-1"
    return provider


@pytest.fixture
def guard(store: RegistryStore, identity_provider: MagicMock) -> PortalAccessGuard:
    return PortalAccessGuard(store, identity_provider)


@pytest.mark.unit
class TestCheckPortalAccess:
    """Tests for check_portal_access."""

    def test_approved_student_gets_in(
        self,
        guard: PortalAccessGuard,
        store: RegistryStore,
        identity_provider: MagicMock,
        make_registration: Callable[..., Registration],
    ) -> None:
        school_class = store.create_class("SS 3 B", "SS3B")
        registration = make_registration(class_id=school_class.id)
        store.transition_approval(registration.id, ApprovalStatus.APPROVED, "admin-1")

        access = guard.check_portal_access("student1@example.com", "Secure123")

        identity_provider.verify_credentials.assert_called_once_with(
            "student1@example.com", "Secure123"
        )
        assert access.registration_id == registration.id
        assert access.user_id == "user-1"
        assert access.admission_number == registration.admission_number
        assert access.class_id == school_class.id
        assert access.full_name == "Ada Obi"

    def test_pending_student_refused(
        self, guard: PortalAccessGuard, make_registration: Callable[..., Registration]
    ) -> None:
        make_registration()

        with pytest.raises(ApprovalPendingError, match="pending admin approval"):
            guard.check_portal_access("student1@example.com", "Secure123")

    def test_pending_message(self) -> None:
        assert PENDING_MESSAGE.startswith("Your account is still pending")

    def test_rejected_student_refused_with_reason(
        self,
        guard: PortalAccessGuard,
        store: RegistryStore,
        make_registration: Callable[..., Registration],
    ) -> None:
        registration = make_registration()
        store.transition_approval(
            registration.id,
            ApprovalStatus.REJECTED,
            "admin-1",
            comments="Blurry birth certificate",
        )

        with pytest.raises(RegistrationRejectedError) as exc_info:
            guard.check_portal_access("student1@example.com", "Secure123")

        assert exc_info.value.reason == "Blurry birth certificate"
        assert "Blurry birth certificate" in str(exc_info.value)

    def test_wrong_password(
        self,
        guard: PortalAccessGuard,
        identity_provider: MagicMock,
        make_registration: Callable[..., Registration],
    ) -> None:
        make_registration()
        identity_provider.verify_credentials.side_effect = InvalidCredentialsError("nope")

        with pytest.raises(InvalidLoginError, match="Invalid email or password"):
            guard.check_portal_access("student1@example.com", "wrong")

    def test_identity_without_registration(self, guard: PortalAccessGuard) -> None:
        with pytest.raises(PortalAccessDeniedError, match="Student record not found"):
            guard.check_portal_access("student1@example.com", "Secure123")

    def test_provider_outage_propagates(
        self, guard: PortalAccessGuard, identity_provider: MagicMock
    ) -> None:
        identity_provider.verify_credentials.side_effect = IdentityError("timeout")

        with pytest.raises(IdentityError):
            guard.check_portal_access("student1@example.com", "Secure123")
