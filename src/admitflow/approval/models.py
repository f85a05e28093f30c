"""Data models for the Approval module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003


@dataclass
class ApprovalOutcome:
    """Result of a single approve or reject.

    Attributes:
        registration_id: The registration's unique ID.
        status: New approval status.
        reviewer_id: Admin who made the decision.
        reviewed_at: When the decision was recorded.
        comments: Review comments or rejection reason.
        admission_number: Admission number after the transition, if any.
        class_id: Class after the transition, if any.
    """

    registration_id: str
    status: str
    reviewer_id: str
    reviewed_at: datetime
    comments: str | None
    admission_number: str | None
    class_id: str | None


@dataclass
class BulkFailure:
    """A registration a bulk approval could not approve."""

    registration_id: str
    error: str


@dataclass
class BulkApprovalResult:
    """Per-registration results of a bulk approval."""

    succeeded: list[ApprovalOutcome] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)

    @property
    def approved_count(self) -> int:
        return len(self.succeeded)


@dataclass
class PortalAccess:
    """An approved student allowed into the portal."""

    registration_id: str
    user_id: str
    email: str
    full_name: str
    admission_number: str | None
    class_id: str | None
