"""Registry - Persistent storage for classes, registrations and approvals."""

from admitflow.registry.database import Database
from admitflow.registry.exceptions import (
    AdmissionNumberLockedError,
    ApprovalConflictError,
    ClassExistsError,
    ClassNotFoundError,
    ClassRequiredError,
    DuplicateAdmissionNumberError,
    EmailExistsError,
    ProfileExistsError,
    RegistrationNotFoundError,
    RegistryError,
)
from admitflow.registry.models import (
    ApprovalRecord,
    ApprovalStatus,
    DocumentRecord,
    DocumentSlot,
    Identity,
    OrphanedIdentity,
    Registration,
    RegistrationDocument,
    SchoolClass,
    SequenceCounter,
    UserProfile,
    utcnow,
)
from admitflow.registry.store import PROFILE_FIELDS, RegistryStore

__all__ = [
    "AdmissionNumberLockedError",
    "ApprovalConflictError",
    "ApprovalRecord",
    "ApprovalStatus",
    "ClassExistsError",
    "ClassNotFoundError",
    "ClassRequiredError",
    "Database",
    "DocumentRecord",
    "DocumentSlot",
    "DuplicateAdmissionNumberError",
    "EmailExistsError",
    "Identity",
    "OrphanedIdentity",
    "PROFILE_FIELDS",
    "ProfileExistsError",
    "Registration",
    "RegistrationDocument",
    "RegistrationNotFoundError",
    "RegistryError",
    "RegistryStore",
    "SchoolClass",
    "SequenceCounter",
    "UserProfile",
    "utcnow",
]
