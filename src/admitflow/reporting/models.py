"""Data models for the Reporting module."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003


@dataclass
class ApprovalStats:
    """Approval counts over all (or a window of) registrations.

    Attributes:
        total: Number of approval records.
        approved: Records in ``approved``.
        pending: Records in ``pending``.
        rejected: Records in ``rejected``.
        approval_rate: approved / total as a fraction, 0.0 when total is 0.
    """

    total: int
    approved: int
    pending: int
    rejected: int
    approval_rate: float


@dataclass
class ApprovalTimeline:
    """When a registration was submitted and reviewed."""

    registration_id: str
    application_date: datetime
    reviewed_at: datetime | None
    status: str
    reviewer_id: str | None = None
    comments: str | None = None


@dataclass
class ApprovalReport:
    """Summary of applications created in a period.

    ``average_approval_time_hours`` only counts approved applications with a
    review time and is None when there are none.
    """

    period: str
    total_applications: int
    total_approved: int
    total_rejected: int
    total_pending: int
    average_approval_time_hours: float | None
