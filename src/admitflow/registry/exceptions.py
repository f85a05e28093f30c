"""Custom exceptions for the Registry."""

from __future__ import annotations


class RegistryError(Exception):
    """Base exception for Registry errors."""


class ClassNotFoundError(RegistryError):
    """Class with given ID or code does not exist."""


class ClassExistsError(RegistryError):
    """Class with given code already exists."""


class RegistrationNotFoundError(RegistryError):
    """Registration with given ID or admission number does not exist."""


class ProfileExistsError(RegistryError):
    """User profile for this identity already exists."""


class EmailExistsError(RegistryError):
    """Email address is already used by another profile or registration."""


class DuplicateAdmissionNumberError(RegistryError):
    """Admission number collided with an existing registration."""


class ClassRequiredError(RegistryError):
    """An admission number cannot be assigned without a class."""


class ApprovalConflictError(RegistryError):
    """Approval record is no longer pending."""

    def __init__(self, registration_id: str, current_status: str) -> None:
        super().__init__(
            f"Approval for registration '{registration_id}' is {current_status}, not pending"
        )
        self.registration_id = registration_id
        self.current_status = current_status


class AdmissionNumberLockedError(RegistryError):
    """Class cannot change once an admission number has been issued."""
