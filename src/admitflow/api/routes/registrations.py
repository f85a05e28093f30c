"""Registration submission, review and lookup endpoints."""

from fastapi import APIRouter, Query, status

from admitflow.api.dependencies import (
    AccessGuardDep,
    AggregatorDep,
    RegistryStoreDep,
    StateMachineDep,
    SubmissionHandlerDep,
)
from admitflow.api.models import (
    APIResponse,
    ApprovalOutcomeResponse,
    ApprovalTimelineResponse,
    ApproveRequest,
    BulkApprovalResponse,
    BulkApproveRequest,
    PortalAccessRequest,
    PortalAccessResponse,
    RegistrationResponse,
    RejectRequest,
    SubmissionResponse,
    registration_to_response,
)
from admitflow.registry import ApprovalStatus
from admitflow.submission import RegistrationPayload

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.post(
    "",
    response_model=APIResponse[SubmissionResponse],
    status_code=status.HTTP_201_CREATED,
)
def submit_registration(
    payload: RegistrationPayload, handler: SubmissionHandlerDep
) -> APIResponse[SubmissionResponse]:
    """Submit a new student registration."""
    result = handler.submit_registration(payload)
    return APIResponse(data=SubmissionResponse.model_validate(result))


@router.post("/access", response_model=APIResponse[PortalAccessResponse])
def check_portal_access(
    request: PortalAccessRequest, guard: AccessGuardDep
) -> APIResponse[PortalAccessResponse]:
    """Check a student login; only approved registrations get in."""
    access = guard.check_portal_access(request.email, request.password)
    return APIResponse(data=PortalAccessResponse.model_validate(access))


@router.get("", response_model=APIResponse[list[RegistrationResponse]])
def list_registrations(
    store: RegistryStoreDep,
    status_filter: ApprovalStatus | None = Query(
        default=None, alias="status", description="Filter by approval status"
    ),
    class_id: str | None = Query(default=None, description="Filter by class ID"),
    state: str | None = Query(default=None, description="Filter by state of origin"),
    gender: str | None = Query(default=None, description="Filter by gender"),
    q: str | None = Query(default=None, description="Search names and email"),
    limit: int = Query(default=100, ge=1, le=1000, description="Max results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
) -> APIResponse[list[RegistrationResponse]]:
    """List registrations with optional filters and pagination."""
    registrations = store.list_registrations(
        status=status_filter,
        class_id=class_id,
        state=state,
        gender=gender,
        query=q,
        limit=limit,
        offset=offset,
    )
    return APIResponse(data=[registration_to_response(r) for r in registrations])


@router.get("/pending", response_model=APIResponse[list[RegistrationResponse]])
def list_pending(
    store: RegistryStoreDep,
    limit: int = Query(default=100, ge=1, le=1000, description="Max results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
) -> APIResponse[list[RegistrationResponse]]:
    """List registrations awaiting review, most recent first."""
    registrations = store.list_pending(limit=limit, offset=offset)
    return APIResponse(data=[registration_to_response(r) for r in registrations])


@router.get("/lookup", response_model=APIResponse[RegistrationResponse])
def lookup_registration(
    store: RegistryStoreDep,
    admission_number: str = Query(..., description="Admission number, e.g. ELBA/25/SS3B/011"),
) -> APIResponse[RegistrationResponse]:
    """Find a registration by its admission number."""
    registration = store.get_registration_by_admission_number(admission_number)
    return APIResponse(data=registration_to_response(registration))


@router.post("/bulk-approve", response_model=APIResponse[BulkApprovalResponse])
def bulk_approve(
    request: BulkApproveRequest, state_machine: StateMachineDep
) -> APIResponse[BulkApprovalResponse]:
    """Approve several registrations; each one succeeds or fails on its own."""
    result = state_machine.bulk_approve(
        request.registration_ids,
        reviewer_id=request.reviewer_id,
        comments=request.comments,
    )
    return APIResponse(data=BulkApprovalResponse.model_validate(result))


@router.get("/{registration_id}", response_model=APIResponse[RegistrationResponse])
def get_registration(
    registration_id: str, store: RegistryStoreDep
) -> APIResponse[RegistrationResponse]:
    """Get a registration by ID."""
    registration = store.get_registration(registration_id)
    return APIResponse(data=registration_to_response(registration))


@router.get("/{registration_id}/timeline", response_model=APIResponse[ApprovalTimelineResponse])
def get_timeline(
    registration_id: str, aggregator: AggregatorDep
) -> APIResponse[ApprovalTimelineResponse]:
    """Get when a registration was submitted and reviewed."""
    timeline = aggregator.get_approval_timeline(registration_id)
    return APIResponse(data=ApprovalTimelineResponse.model_validate(timeline))


@router.post("/{registration_id}/approve", response_model=APIResponse[ApprovalOutcomeResponse])
def approve_registration(
    registration_id: str, request: ApproveRequest, state_machine: StateMachineDep
) -> APIResponse[ApprovalOutcomeResponse]:
    """Approve a pending registration."""
    outcome = state_machine.approve(
        registration_id,
        reviewer_id=request.reviewer_id,
        comments=request.comments,
        class_id=request.class_id,
    )
    return APIResponse(data=ApprovalOutcomeResponse.model_validate(outcome))


@router.post("/{registration_id}/reject", response_model=APIResponse[ApprovalOutcomeResponse])
def reject_registration(
    registration_id: str, request: RejectRequest, state_machine: StateMachineDep
) -> APIResponse[ApprovalOutcomeResponse]:
    """Reject a pending registration."""
    outcome = state_machine.reject(
        registration_id,
        reviewer_id=request.reviewer_id,
        reason=request.reason,
    )
    return APIResponse(data=ApprovalOutcomeResponse.model_validate(outcome))
