"""Pydantic models for REST API."""

from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from admitflow.approval import BULK_APPROVAL_COMMENT

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class FieldErrorResponse(BaseModel):
    """One failed validation rule."""

    field: str
    message: str


# Class models


class ClassCreate(BaseModel):
    """Request model for creating a class."""

    name: str = Field(..., min_length=1, max_length=255)
    class_code: str = Field(..., pattern=r"^[A-Z0-9]{2,5}$")


class ClassResponse(BaseModel):
    """Response model for a class."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    class_code: str
    created_at: datetime


def class_to_response(school_class: Any) -> ClassResponse:
    """Convert a SchoolClass model to ClassResponse."""
    return ClassResponse.model_validate(school_class)


# Registration models


class SubmissionResponse(BaseModel):
    """Response model for a submitted registration."""

    model_config = ConfigDict(from_attributes=True)

    registration_id: str
    user_id: str
    admission_number: str | None
    message: str
    failed_documents: list[str]


class DocumentResponse(BaseModel):
    """Response model for an attached document."""

    model_config = ConfigDict(from_attributes=True)

    slot: str
    filename: str
    content_type: str
    size_bytes: int
    url: str | None
    upload_error: str | None


class ApprovalResponse(BaseModel):
    """Response model for an approval record."""

    model_config = ConfigDict(from_attributes=True)

    status: str
    reviewer_id: str | None
    reviewed_at: datetime | None
    comments: str | None
    created_at: datetime


class RegistrationResponse(BaseModel):
    """Response model for a registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    email: str
    first_name: str
    last_name: str
    gender: str
    date_of_birth: date
    phone: str
    address: str
    state: str
    lga: str
    guardian_name: str
    guardian_phone: str
    guardian_email: str
    guardian_relationship: str
    previous_school: str | None
    class_id: str | None
    admission_number: str | None
    status: str
    approval: ApprovalResponse
    documents: list[DocumentResponse]
    created_at: datetime
    updated_at: datetime


def registration_to_response(registration: Any) -> RegistrationResponse:
    """Convert a Registration model to RegistrationResponse."""
    return RegistrationResponse.model_validate(registration)


# Approval models


class ApproveRequest(BaseModel):
    """Request model for approving a registration."""

    reviewer_id: str
    comments: str | None = Field(default=None, max_length=2000)
    class_id: str | None = None


class RejectRequest(BaseModel):
    """Request model for rejecting a registration."""

    reviewer_id: str
    reason: str = Field(..., max_length=2000)


class BulkApproveRequest(BaseModel):
    """Request model for approving several registrations."""

    registration_ids: list[str] = Field(..., min_length=1)
    reviewer_id: str
    comments: str = Field(default=BULK_APPROVAL_COMMENT, max_length=2000)


class ApprovalOutcomeResponse(BaseModel):
    """Response model for an approve or reject."""

    model_config = ConfigDict(from_attributes=True)

    registration_id: str
    status: str
    reviewer_id: str
    reviewed_at: datetime
    comments: str | None
    admission_number: str | None
    class_id: str | None


class PortalAccessRequest(BaseModel):
    """Student login checked against the approval status."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class PortalAccessResponse(BaseModel):
    """Response model for a granted portal access."""

    model_config = ConfigDict(from_attributes=True)

    registration_id: str
    user_id: str
    email: str
    full_name: str
    admission_number: str | None
    class_id: str | None


class BulkFailureResponse(BaseModel):
    """Response model for one failed bulk approval."""

    model_config = ConfigDict(from_attributes=True)

    registration_id: str
    error: str


class BulkApprovalResponse(BaseModel):
    """Response model for a bulk approval."""

    model_config = ConfigDict(from_attributes=True)

    succeeded: list[ApprovalOutcomeResponse]
    failed: list[BulkFailureResponse]


# Reporting models


class ApprovalStatsResponse(BaseModel):
    """Response model for approval statistics."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    approved: int
    pending: int
    rejected: int
    approval_rate: float


class ApprovalTimelineResponse(BaseModel):
    """Response model for a registration's approval timeline."""

    model_config = ConfigDict(from_attributes=True)

    registration_id: str
    application_date: datetime
    reviewed_at: datetime | None
    status: str
    reviewer_id: str | None
    comments: str | None


class ApprovalReportResponse(BaseModel):
    """Response model for an approval report."""

    model_config = ConfigDict(from_attributes=True)

    period: str
    total_applications: int
    total_approved: int
    total_rejected: int
    total_pending: int
    average_approval_time_hours: float | None


# Cleanup models


class OrphanedIdentityResponse(BaseModel):
    """An identity left behind by a failed rollback."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    identity_id: str
    email: str
    failed_step: str
    reason: str
    created_at: datetime
