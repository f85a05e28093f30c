"""Exceptions for the Approval module."""

from __future__ import annotations


class ApprovalError(Exception):
    """Base exception for approval errors."""


class InvalidStateTransitionError(ApprovalError):
    """The approval record is not pending; nothing was changed."""

    def __init__(self, registration_id: str, current_status: str, target: str) -> None:
        super().__init__(
            f"Cannot move registration '{registration_id}' from {current_status} to {target}"
        )
        self.registration_id = registration_id
        self.current_status = current_status
        self.target = target


class MissingReasonError(ApprovalError):
    """A rejection needs a non-blank reason."""


class MissingReviewerError(ApprovalError):
    """Every transition needs the ID of the reviewing admin."""


class ClassAssignmentRequiredError(ApprovalError):
    """Approval needs a class to issue the admission number."""


class PortalAccessDeniedError(ApprovalError):
    """The student may not enter the portal."""


class InvalidLoginError(PortalAccessDeniedError):
    """Email or password is wrong."""


class ApprovalPendingError(PortalAccessDeniedError):
    """The registration has not been reviewed yet."""


class RegistrationRejectedError(PortalAccessDeniedError):
    """The registration was rejected."""

    def __init__(self, reason: str | None) -> None:
        message = "Your registration was not approved"
        super().__init__(f"{message}: {reason}" if reason else message)
        self.reason = reason
