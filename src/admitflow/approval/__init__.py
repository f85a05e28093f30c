"""Approval - admin review of pending registrations and the portal access check."""

from admitflow.approval.access import PENDING_MESSAGE, PortalAccessGuard
from admitflow.approval.exceptions import (
    ApprovalError,
    ApprovalPendingError,
    ClassAssignmentRequiredError,
    InvalidLoginError,
    InvalidStateTransitionError,
    MissingReasonError,
    MissingReviewerError,
    PortalAccessDeniedError,
    RegistrationRejectedError,
)
from admitflow.approval.models import (
    ApprovalOutcome,
    BulkApprovalResult,
    BulkFailure,
    PortalAccess,
)
from admitflow.approval.state_machine import BULK_APPROVAL_COMMENT, ApprovalStateMachine

__all__ = [
    "ApprovalError",
    "ApprovalOutcome",
    "ApprovalPendingError",
    "ApprovalStateMachine",
    "BULK_APPROVAL_COMMENT",
    "BulkApprovalResult",
    "BulkFailure",
    "ClassAssignmentRequiredError",
    "InvalidLoginError",
    "InvalidStateTransitionError",
    "MissingReasonError",
    "MissingReviewerError",
    "PENDING_MESSAGE",
    "PortalAccess",
    "PortalAccessDeniedError",
    "PortalAccessGuard",
    "RegistrationRejectedError",
]
