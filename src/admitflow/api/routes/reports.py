"""Approval statistics and export endpoints."""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, Response, status

from admitflow.api.dependencies import AggregatorDep
from admitflow.api.models import (
    APIResponse,
    ApprovalReportResponse,
    ApprovalStatsResponse,
)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/stats", response_model=APIResponse[ApprovalStatsResponse])
def get_stats(
    aggregator: AggregatorDep,
    start: date | None = Query(default=None, description="Count records created from this day"),
    end: date | None = Query(default=None, description="Count records created up to this day"),
) -> APIResponse[ApprovalStatsResponse]:
    """Get approval counts and approval rate."""
    if (start is None) != (end is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start and end must be given together",
        )
    date_range = (start, end) if start is not None and end is not None else None
    stats = aggregator.get_stats(date_range)
    return APIResponse(data=ApprovalStatsResponse.model_validate(stats))


@router.get("/approvals", response_model=APIResponse[ApprovalReportResponse])
def get_approval_report(
    aggregator: AggregatorDep,
    start: date = Query(..., description="First day of the period"),
    end: date = Query(..., description="Last day of the period"),
) -> APIResponse[ApprovalReportResponse]:
    """Summarize applications created in a period."""
    report = aggregator.generate_approval_report(start, end)
    return APIResponse(data=ApprovalReportResponse.model_validate(report))


@router.get("/pending.csv", response_model=None)
def export_pending(aggregator: AggregatorDep) -> Response:
    """Download pending registrations as CSV (204 when nothing is pending)."""
    content = aggregator.export_pending_csv()
    if content is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="pending-registrations.csv"'},
    )
