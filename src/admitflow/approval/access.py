"""PortalAccessGuard - only approved students get into the portal."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from admitflow.approval.exceptions import (
    ApprovalPendingError,
    InvalidLoginError,
    PortalAccessDeniedError,
    RegistrationRejectedError,
)
from admitflow.approval.models import PortalAccess
from admitflow.identity import InvalidCredentialsError
from admitflow.registry import ApprovalStatus, RegistrationNotFoundError

if TYPE_CHECKING:
    from admitflow.identity import IdentityProvider
    from admitflow.registry import RegistryStore

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "Your account is still pending admin approval. Please check back later."


class PortalAccessGuard:
    """Checks a student's login against their approval status.

    Credentials are verified with the identity provider first; a pending or
    rejected registration is refused even when the password is right.
    """

    def __init__(self, store: RegistryStore, identity_provider: IdentityProvider) -> None:
        self.store = store
        self.identity_provider = identity_provider

    def check_portal_access(self, email: str, password: str) -> PortalAccess:
        """Return the student's access details if they may enter the portal.

        Raises:
            InvalidLoginError: If the credentials are wrong
            PortalAccessDeniedError: If the identity has no registration
            ApprovalPendingError: If the registration awaits review
            RegistrationRejectedError: If the registration was rejected
            IdentityError: If the identity provider could not be reached
        """
        try:
            user_id = self.identity_provider.verify_credentials(email, password)
        except InvalidCredentialsError as e:
            raise InvalidLoginError("Invalid email or password") from e

        try:
            registration = self.store.get_registration_by_user(user_id)
        except RegistrationNotFoundError as e:
            logger.warning("Identity %s has no registration", user_id)
            raise PortalAccessDeniedError("Student record not found") from e

        status = registration.status
        if status == ApprovalStatus.PENDING:
            raise ApprovalPendingError(PENDING_MESSAGE)
        if status == ApprovalStatus.REJECTED:
            raise RegistrationRejectedError(registration.approval.comments)

        logger.info("Portal access granted to %s (%s)", user_id, registration.admission_number)
        return PortalAccess(
            registration_id=registration.id,
            user_id=user_id,
            email=registration.email,
            full_name=registration.full_name,
            admission_number=registration.admission_number,
            class_id=registration.class_id,
        )
