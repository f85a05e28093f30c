"""Registration submission - validate a form and persist it as a pending registration."""

from admitflow.submission.exceptions import (
    AuthError,
    DuplicateEmailError,
    FieldError,
    PersistenceError,
    SubmissionError,
    ValidationError,
)
from admitflow.submission.handler import (
    SUCCESS_MESSAGE,
    RegistrationSubmissionHandler,
    SubmissionResult,
)
from admitflow.submission.schemas import (
    NIGERIAN_STATES,
    DocumentUpload,
    RegistrationPayload,
)

__all__ = [
    "AuthError",
    "DocumentUpload",
    "DuplicateEmailError",
    "FieldError",
    "NIGERIAN_STATES",
    "PersistenceError",
    "RegistrationPayload",
    "RegistrationSubmissionHandler",
    "SUCCESS_MESSAGE",
    "SubmissionError",
    "SubmissionResult",
    "ValidationError",
]
