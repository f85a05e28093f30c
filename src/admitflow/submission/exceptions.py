"""Custom exceptions for registration submission."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FieldError:
    """One failed validation rule."""

    field: str
    message: str


class SubmissionError(Exception):
    """Base exception for submission errors."""


class ValidationError(SubmissionError):
    """The payload or its documents failed validation.

    Nothing has been written when this is raised.
    """

    def __init__(self, errors: list[FieldError]) -> None:
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid registration: {summary}")
        self.errors = errors


class AuthError(SubmissionError):
    """The identity provider refused to create the identity."""


class DuplicateEmailError(SubmissionError):
    """The email address is already registered."""


class PersistenceError(SubmissionError):
    """A write failed after the identity was created.

    Attributes:
        step: Step that failed ("profile" or "registration")
        identity_id: Identity created for the submission
        rolled_back: False if the identity could not be deleted and was
            flagged for manual cleanup
    """

    def __init__(self, message: str, step: str, identity_id: str, rolled_back: bool) -> None:
        super().__init__(message)
        self.step = step
        self.identity_id = identity_id
        self.rolled_back = rolled_back
