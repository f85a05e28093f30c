"""Custom exceptions for reporting."""


class ReportingError(Exception):
    """Base exception for reporting errors."""


class InvalidDateRangeError(ReportingError):
    """Report period starts after it ends."""
