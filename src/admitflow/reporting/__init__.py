"""Reporting - approval statistics, timelines and exports."""

from admitflow.reporting.aggregator import CSV_HEADERS, ReportingAggregator
from admitflow.reporting.exceptions import InvalidDateRangeError, ReportingError
from admitflow.reporting.models import ApprovalReport, ApprovalStats, ApprovalTimeline

__all__ = [
    "ApprovalReport",
    "ApprovalStats",
    "ApprovalTimeline",
    "CSV_HEADERS",
    "InvalidDateRangeError",
    "ReportingAggregator",
    "ReportingError",
]
