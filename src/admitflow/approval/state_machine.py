"""ApprovalStateMachine - pending -> approved | rejected transitions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from admitflow.approval.exceptions import (
    ApprovalError,
    ClassAssignmentRequiredError,
    InvalidStateTransitionError,
    MissingReasonError,
    MissingReviewerError,
)
from admitflow.approval.models import ApprovalOutcome, BulkApprovalResult, BulkFailure
from admitflow.regnumber import RegistrationNumberError
from admitflow.registry import (
    ApprovalConflictError,
    ApprovalStatus,
    ClassRequiredError,
    RegistryError,
)

if TYPE_CHECKING:
    from datetime import datetime

    from admitflow.api.events import EventManager
    from admitflow.registry import Registration, RegistryStore

logger = logging.getLogger(__name__)

BULK_APPROVAL_COMMENT = "Bulk approved"


class ApprovalStateMachine:
    """Moves registrations out of ``pending``.

    ``pending`` is the only state with outgoing transitions. Each transition
    is a single conditional update, so when two reviewers act on the same
    registration the first one wins and the second gets
    InvalidStateTransitionError.
    """

    def __init__(
        self,
        store: RegistryStore,
        event_manager: EventManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            store: Registry holding the approval records.
            event_manager: Receives approved/rejected events (optional).
            clock: Returns the decision time; defaults to the store's clock.
        """
        self.store = store
        self.event_manager = event_manager
        self._clock = clock or store.now

    def approve(
        self,
        registration_id: str,
        reviewer_id: str,
        comments: str | None = None,
        class_id: str | None = None,
    ) -> ApprovalOutcome:
        """Approve a pending registration.

        Issues the admission number if the registration doesn't have one yet.

        Args:
            registration_id: The registration's unique ID.
            reviewer_id: ID of the approving admin.
            comments: Optional review comments.
            class_id: Class to place the student in, if not chosen at submission.

        Returns:
            ApprovalOutcome for the approved registration.

        Raises:
            MissingReviewerError: If reviewer_id is blank.
            RegistrationNotFoundError: If the registration doesn't exist.
            InvalidStateTransitionError: If the registration is not pending.
            ClassAssignmentRequiredError: If no class is known for numbering.
        """
        reviewer_id = self._require_reviewer(reviewer_id)
        registration = self._transition(
            registration_id,
            ApprovalStatus.APPROVED,
            reviewer_id,
            comments=comments,
            class_id=class_id,
        )
        logger.info(
            "Registration %s approved by %s (%s)",
            registration_id,
            reviewer_id,
            registration.admission_number,
        )
        if self.event_manager is not None:
            self.event_manager.emit_registration_approved(
                registration_id=registration.id,
                reviewer_id=reviewer_id,
                class_id=registration.class_id,
                admission_number=registration.admission_number,
            )
        return _outcome(registration)

    def reject(self, registration_id: str, reviewer_id: str, reason: str) -> ApprovalOutcome:
        """Reject a pending registration.

        The registration is kept; only its approval status changes.

        Raises:
            MissingReviewerError: If reviewer_id is blank.
            MissingReasonError: If reason is blank.
            RegistrationNotFoundError: If the registration doesn't exist.
            InvalidStateTransitionError: If the registration is not pending.
        """
        reviewer_id = self._require_reviewer(reviewer_id)
        if reason is None or not reason.strip():
            raise MissingReasonError("A rejection reason is required")
        reason = reason.strip()

        registration = self._transition(
            registration_id,
            ApprovalStatus.REJECTED,
            reviewer_id,
            comments=reason,
        )
        logger.info("Registration %s rejected by %s", registration_id, reviewer_id)
        if self.event_manager is not None:
            self.event_manager.emit_registration_rejected(
                registration_id=registration.id,
                reviewer_id=reviewer_id,
                class_id=registration.class_id,
                reason=reason,
            )
        return _outcome(registration)

    def bulk_approve(
        self,
        registration_ids: Iterable[str],
        reviewer_id: str,
        comments: str = BULK_APPROVAL_COMMENT,
    ) -> BulkApprovalResult:
        """Approve several registrations independently.

        A failure on one ID doesn't stop the others. Duplicate IDs are
        processed once.

        Raises:
            MissingReviewerError: If reviewer_id is blank.
        """
        reviewer_id = self._require_reviewer(reviewer_id)
        result = BulkApprovalResult()

        for registration_id in dict.fromkeys(registration_ids):
            try:
                result.succeeded.append(self.approve(registration_id, reviewer_id, comments))
            except (ApprovalError, RegistryError, RegistrationNumberError) as e:
                logger.warning("Bulk approval skipped %s: %s", registration_id, e)
                result.failed.append(BulkFailure(registration_id=registration_id, error=str(e)))

        logger.info(
            "Bulk approval by %s: %d approved, %d failed",
            reviewer_id,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    def _require_reviewer(self, reviewer_id: str) -> str:
        if reviewer_id is None or not reviewer_id.strip():
            raise MissingReviewerError("A reviewer ID is required")
        return reviewer_id.strip()

    def _transition(
        self,
        registration_id: str,
        target: ApprovalStatus,
        reviewer_id: str,
        comments: str | None = None,
        class_id: str | None = None,
    ) -> Registration:
        try:
            return self.store.transition_approval(
                registration_id,
                target,
                reviewer_id,
                comments=comments,
                class_id=class_id,
                assign_number=target == ApprovalStatus.APPROVED,
                reviewed_at=self._clock(),
            )
        except ApprovalConflictError as e:
            raise InvalidStateTransitionError(
                registration_id, e.current_status, target.value
            ) from e
        except ClassRequiredError as e:
            raise ClassAssignmentRequiredError(
                f"Registration '{registration_id}' needs a class before it can be approved"
            ) from e


def _outcome(registration: Registration) -> ApprovalOutcome:
    approval = registration.approval
    return ApprovalOutcome(
        registration_id=registration.id,
        status=approval.status,
        reviewer_id=approval.reviewer_id or "",
        reviewed_at=approval.reviewed_at,  # type: ignore[arg-type]
        comments=approval.comments,
        admission_number=registration.admission_number,
        class_id=registration.class_id,
    )
