"""ReportingAggregator - read-only approval statistics and exports."""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, time
from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, case, func, select

from admitflow.registry import (
    ApprovalRecord,
    ApprovalStatus,
    Registration,
    RegistrationNotFoundError,
)
from admitflow.reporting.exceptions import InvalidDateRangeError
from admitflow.reporting.models import ApprovalReport, ApprovalStats, ApprovalTimeline

if TYPE_CHECKING:
    from admitflow.registry import RegistryStore

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Admission Number",
    "First Name",
    "Last Name",
    "Email",
    "Phone",
    "Gender",
    "Date of Birth",
    "State",
    "LGA",
    "Guardian Name",
    "Guardian Phone",
    "Guardian Email",
    "Created At",
]


def _status_count(status: ApprovalStatus) -> ColumnElement[int]:
    return func.sum(case((ApprovalRecord.status == status.value, 1), else_=0))


def _as_bounds(start: date | datetime, end: date | datetime) -> tuple[datetime, datetime]:
    """Turn a date range into inclusive datetime bounds.

    A plain ``date`` as ``end`` covers that whole day.
    """
    if not isinstance(start, datetime):
        start = datetime.combine(start, time.min)
    if not isinstance(end, datetime):
        end = datetime.combine(end, time.max)
    if start > end:
        raise InvalidDateRangeError(
            f"Start {start.isoformat()} is after end {end.isoformat()}"
        )
    return start, end


class ReportingAggregator:
    """Computes approval statistics from the registry.

    Never writes; every query runs in a short-lived read session.
    """

    def __init__(self, store: RegistryStore) -> None:
        self.store = store
        self._db = store.database

    def get_stats(
        self, date_range: tuple[date | datetime, date | datetime] | None = None
    ) -> ApprovalStats:
        """Count approval records by status.

        Args:
            date_range: Inclusive (start, end) bound on when the records were
                created (optional)

        Returns:
            ApprovalStats
        """
        session = self._db.get_session()
        try:
            stmt = select(
                func.count(ApprovalRecord.id).label("total"),
                _status_count(ApprovalStatus.APPROVED).label("approved"),
                _status_count(ApprovalStatus.PENDING).label("pending"),
                _status_count(ApprovalStatus.REJECTED).label("rejected"),
            )
            if date_range is not None:
                start, end = _as_bounds(*date_range)
                stmt = stmt.where(ApprovalRecord.created_at.between(start, end))

            result = session.execute(stmt).one()
            total = result.total or 0
            approved = result.approved or 0
            return ApprovalStats(
                total=total,
                approved=approved,
                pending=result.pending or 0,
                rejected=result.rejected or 0,
                approval_rate=approved / total if total else 0.0,
            )
        finally:
            session.close()

    def get_approval_timeline(self, registration_id: str) -> ApprovalTimeline:
        """Get submission and review times of a registration.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        session = self._db.get_session()
        try:
            stmt = (
                select(
                    Registration.created_at,
                    ApprovalRecord.status,
                    ApprovalRecord.reviewed_at,
                    ApprovalRecord.reviewer_id,
                    ApprovalRecord.comments,
                )
                .join(ApprovalRecord, ApprovalRecord.registration_id == Registration.id)
                .where(Registration.id == registration_id)
            )
            row = session.execute(stmt).one_or_none()
            if row is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            return ApprovalTimeline(
                registration_id=registration_id,
                application_date=row.created_at,
                reviewed_at=row.reviewed_at,
                status=row.status,
                reviewer_id=row.reviewer_id,
                comments=row.comments,
            )
        finally:
            session.close()

    def generate_approval_report(
        self, start: date | datetime, end: date | datetime
    ) -> ApprovalReport:
        """Summarize applications created between start and end (inclusive).

        Args:
            start: Start of the period
            end: End of the period; a date covers the whole day

        Returns:
            ApprovalReport for the period
        """
        lower, upper = _as_bounds(start, end)
        approved = ApprovalRecord.status == ApprovalStatus.APPROVED.value
        hours_to_review = (
            func.julianday(ApprovalRecord.reviewed_at) - func.julianday(Registration.created_at)
        ) * 24

        session = self._db.get_session()
        try:
            stmt = (
                select(
                    func.count(Registration.id).label("total"),
                    _status_count(ApprovalStatus.APPROVED).label("approved"),
                    _status_count(ApprovalStatus.REJECTED).label("rejected"),
                    _status_count(ApprovalStatus.PENDING).label("pending"),
                    func.avg(
                        case(
                            (approved & ApprovalRecord.reviewed_at.is_not(None), hours_to_review),
                            else_=None,
                        )
                    ).label("avg_hours"),
                )
                .join(ApprovalRecord, ApprovalRecord.registration_id == Registration.id)
                .where(Registration.created_at.between(lower, upper))
            )
            result = session.execute(stmt).one()
        finally:
            session.close()

        average = None if result.avg_hours is None else round(float(result.avg_hours), 2)
        return ApprovalReport(
            period=f"{_period_label(start)} to {_period_label(end)}",
            total_applications=result.total or 0,
            total_approved=result.approved or 0,
            total_rejected=result.rejected or 0,
            total_pending=result.pending or 0,
            average_approval_time_hours=average,
        )

    def export_pending_csv(self) -> str | None:
        """Export pending registrations as CSV, most recent first.

        Returns:
            CSV text, or None when nothing is pending
        """
        pending = self.store.list_registrations(status=ApprovalStatus.PENDING, limit=None)
        if not pending:
            return None

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for registration in pending:
            writer.writerow(
                [
                    registration.admission_number or "",
                    registration.first_name,
                    registration.last_name,
                    registration.email,
                    registration.phone,
                    registration.gender,
                    registration.date_of_birth.isoformat(),
                    registration.state,
                    registration.lga,
                    registration.guardian_name,
                    registration.guardian_phone,
                    registration.guardian_email,
                    registration.created_at.isoformat(sep=" ", timespec="seconds"),
                ]
            )
        logger.info("Exported %d pending registration(s)", len(pending))
        return buffer.getvalue()


def _period_label(value: date | datetime) -> str:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds")
    return value.isoformat()
