"""RegistryStore - Main API for Registry operations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from admitflow.config import DEFAULT_SCHOOL_CODE
from admitflow.regnumber import (
    CLASS_CODE_PATTERN,
    InvalidComponentError,
    RegistrationNumberGenerator,
    parse_registration_number,
    two_digit_year,
)
from admitflow.registry.database import Database
from admitflow.registry.exceptions import (
    AdmissionNumberLockedError,
    ApprovalConflictError,
    ClassExistsError,
    ClassNotFoundError,
    ClassRequiredError,
    DuplicateAdmissionNumberError,
    EmailExistsError,
    ProfileExistsError,
    RegistrationNotFoundError,
    RegistryError,
)
from admitflow.registry.models import (
    ApprovalRecord,
    ApprovalStatus,
    DocumentRecord,
    OrphanedIdentity,
    Registration,
    RegistrationDocument,
    SchoolClass,
    SequenceCounter,
    UserProfile,
    utcnow,
)

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "gender",
    "date_of_birth",
    "phone",
    "address",
    "state",
    "lga",
    "guardian_name",
    "guardian_phone",
    "guardian_email",
    "guardian_relationship",
    "previous_school",
)


class _SessionSequenceSource:
    """Sequence source bound to an open write transaction.

    The counter row is incremented with a single UPDATE inside the caller's
    transaction, so the number is reserved and the registration row written
    under the same SQLite write lock.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def next_sequence(self, year: int, class_code: str) -> int:
        bucket = (SequenceCounter.year == year, SequenceCounter.class_code == class_code)

        existing = self._session.execute(
            select(SequenceCounter.value).where(*bucket)
        ).scalar_one_or_none()
        if existing is None:
            seed = self._highest_issued(year, class_code)
            self._session.execute(
                sqlite_insert(SequenceCounter)
                .values(year=year, class_code=class_code, value=seed)
                .on_conflict_do_nothing(index_elements=["year", "class_code"])
            )

        self._session.execute(
            update(SequenceCounter).where(*bucket).values(value=SequenceCounter.value + 1)
        )
        return self._session.execute(select(SequenceCounter.value).where(*bucket)).scalar_one()

    def _highest_issued(self, year: int, class_code: str) -> int:
        """Highest sequence already present in the bucket (0 if none)."""
        numbers = self._session.execute(
            select(Registration.admission_number).where(
                Registration.admission_number.like(f"%/{year:02d}/{class_code}/%")
            )
        ).scalars()
        highest = 0
        for number in numbers:
            parsed = parse_registration_number(number)
            if parsed.class_code == class_code and parsed.year == year:
                highest = max(highest, parsed.sequence)
        return highest


class RegistryStore:
    """Main API for Registry operations.

    Provides persistence for classes, user profiles, registrations and their
    approval records. Every method runs in its own session and transaction.
    """

    def __init__(
        self,
        db_path: str = "admitflow.db",
        school_code: str = DEFAULT_SCHOOL_CODE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the Registry with SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            school_code: School code used in admission numbers
            clock: Returns the current naive-UTC time (defaults to utcnow)
        """
        self._db = Database(db_path)
        self._db.create_tables()
        self._generator = RegistrationNumberGenerator(school_code)
        self._clock = clock or utcnow

    @property
    def database(self) -> Database:
        """Underlying database, for read-only reporting queries."""
        return self._db

    @property
    def school_code(self) -> str:
        return self._generator.school_code

    def now(self) -> datetime:
        """Current time according to the store's clock."""
        return self._clock()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Class Operations ---

    def create_class(self, name: str, class_code: str) -> SchoolClass:
        """Create a class.

        Args:
            name: Display name, e.g. "SS 3 B"
            class_code: Code used in admission numbers, e.g. "SS3B"

        Returns:
            Created SchoolClass

        Raises:
            InvalidComponentError: If class_code can't appear in an admission number
            ClassExistsError: If a class with this code already exists
        """
        if not CLASS_CODE_PATTERN.match(class_code):
            raise InvalidComponentError(f"Invalid class code: {class_code!r}")

        session = self._db.get_session()
        try:
            school_class = SchoolClass(name=name, class_code=class_code, created_at=self.now())
            session.add(school_class)
            session.commit()
            session.refresh(school_class)
            return school_class
        except IntegrityError as e:
            session.rollback()
            raise ClassExistsError(f"Class with code '{class_code}' already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryError(f"Could not create class '{class_code}': {e}") from e
        finally:
            session.close()

    def get_class(self, class_id: str) -> SchoolClass:
        """Get class by ID.

        Raises:
            ClassNotFoundError: If class doesn't exist
        """
        session = self._db.get_session()
        try:
            school_class = session.get(SchoolClass, class_id)
            if school_class is None:
                raise ClassNotFoundError(f"Class with id '{class_id}' not found")
            return school_class
        finally:
            session.close()

    def get_class_by_code(self, class_code: str) -> SchoolClass:
        """Get class by its admission-number code.

        Raises:
            ClassNotFoundError: If class doesn't exist
        """
        session = self._db.get_session()
        try:
            stmt = select(SchoolClass).where(SchoolClass.class_code == class_code)
            school_class = session.execute(stmt).scalar_one_or_none()
            if school_class is None:
                raise ClassNotFoundError(f"Class with code '{class_code}' not found")
            return school_class
        finally:
            session.close()

    def list_classes(self) -> list[SchoolClass]:
        """List all classes, ordered by code."""
        session = self._db.get_session()
        try:
            stmt = select(SchoolClass).order_by(SchoolClass.class_code)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    # --- Profile Operations ---

    def email_exists(self, email: str) -> bool:
        """Check whether an email is used by any profile or registration."""
        email = email.lower()
        session = self._db.get_session()
        try:
            profile = session.execute(
                select(UserProfile.id).where(UserProfile.email == email).limit(1)
            ).first()
            if profile is not None:
                return True
            registration = session.execute(
                select(Registration.id).where(Registration.email == email).limit(1)
            ).first()
            return registration is not None
        except SQLAlchemyError as e:
            raise RegistryError(f"Could not check email '{email}': {e}") from e
        finally:
            session.close()

    def create_user_profile(
        self,
        user_id: str,
        email: str,
        full_name: str,
        role: str = "student",
    ) -> UserProfile:
        """Create the portal user record for an identity.

        Raises:
            ProfileExistsError: If a profile for user_id already exists
            EmailExistsError: If another profile uses this email
        """
        session = self._db.get_session()
        try:
            if session.get(UserProfile, user_id) is not None:
                raise ProfileExistsError(f"Profile for user '{user_id}' already exists")

            profile = UserProfile(
                id=user_id,
                email=email.lower(),
                full_name=full_name,
                role=role,
                created_at=self.now(),
            )
            session.add(profile)
            session.commit()
            session.refresh(profile)
            return profile
        except IntegrityError as e:
            session.rollback()
            raise EmailExistsError(f"Email '{email}' is already registered") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryError(f"Could not create profile for '{user_id}': {e}") from e
        finally:
            session.close()

    def delete_user_profile(self, user_id: str) -> None:
        """Delete a user profile. Missing profiles are ignored."""
        session = self._db.get_session()
        try:
            profile = session.get(UserProfile, user_id)
            if profile is not None:
                session.delete(profile)
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryError(f"Could not delete profile '{user_id}': {e}") from e
        finally:
            session.close()

    # --- Registration Operations ---

    def create_registration(
        self,
        user_id: str,
        email: str,
        profile: Mapping[str, Any],
        class_id: str | None = None,
        documents: Sequence[DocumentRecord] = (),
    ) -> Registration:
        """Create a registration with its pending approval record.

        The registration, its documents, the approval record and (when a
        class is given) the admission number are written in one transaction.

        Args:
            user_id: ID of the applicant's user profile
            email: Applicant email
            profile: Personal, contact and guardian fields (see PROFILE_FIELDS)
            class_id: Class applied for (optional)
            documents: Upload outcomes to attach

        Returns:
            Created Registration

        Raises:
            ClassNotFoundError: If class_id doesn't exist
            EmailExistsError: If a registration with this email exists
            DuplicateAdmissionNumberError: If the issued number collides
        """
        unknown = set(profile) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        session = self._db.get_session()
        try:
            school_class = None
            if class_id is not None:
                school_class = session.get(SchoolClass, class_id)
                if school_class is None:
                    raise ClassNotFoundError(f"Class with id '{class_id}' not found")

            now = self.now()
            registration = Registration(
                user_id=user_id,
                email=email.lower(),
                first_name=profile["first_name"],
                last_name=profile["last_name"],
                **{k: v for k, v in profile.items() if k not in ("first_name", "last_name")},
                class_id=class_id,
                created_at=now,
                updated_at=now,
            )
            registration.school_class = school_class
            registration.approval = ApprovalRecord(
                status=ApprovalStatus.PENDING.value,
                created_at=now,
            )
            registration.documents = [
                RegistrationDocument(
                    slot=doc.slot,
                    filename=doc.filename,
                    content_type=doc.content_type,
                    size_bytes=doc.size_bytes,
                    url=doc.url,
                    upload_error=doc.upload_error,
                )
                for doc in documents
            ]
            session.add(registration)
            # Insert first so the write lock is held before a sequence is reserved
            session.flush()

            if school_class is not None:
                registration.admission_number = self._generator.generate(
                    _SessionSequenceSource(session),
                    school_class.class_code,
                    two_digit_year(now),
                )

            session.commit()
            session.refresh(registration)
            logger.info(
                "Created registration %s (admission number %s)",
                registration.id,
                registration.admission_number or "deferred",
            )
            return registration
        except IntegrityError as e:
            session.rollback()
            raise _classify_integrity_error(e, email) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryError(f"Could not create registration for '{email}': {e}") from e
        finally:
            session.close()

    def get_registration(self, registration_id: str) -> Registration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        session = self._db.get_session()
        try:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            return registration
        finally:
            session.close()

    def get_registration_by_admission_number(self, admission_number: str) -> Registration:
        """Get registration by admission number.

        Raises:
            InvalidRegistrationNumberError: If admission_number is malformed
            RegistrationNotFoundError: If registration doesn't exist
        """
        parse_registration_number(admission_number)

        session = self._db.get_session()
        try:
            stmt = select(Registration).where(Registration.admission_number == admission_number)
            registration = session.execute(stmt).unique().scalar_one_or_none()
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with admission number '{admission_number}' not found"
                )
            return registration
        finally:
            session.close()

    def get_registration_by_user(self, user_id: str) -> Registration:
        """Get the registration belonging to a portal user.

        Raises:
            RegistrationNotFoundError: If the user has no registration
        """
        session = self._db.get_session()
        try:
            stmt = select(Registration).where(Registration.user_id == user_id)
            registration = session.execute(stmt).unique().scalars().first()
            if registration is None:
                raise RegistrationNotFoundError(f"No registration for user '{user_id}'")
            return registration
        finally:
            session.close()

    def list_registrations(
        self,
        status: ApprovalStatus | None = None,
        class_id: str | None = None,
        state: str | None = None,
        gender: str | None = None,
        query: str | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> list[Registration]:
        """List registrations with optional filters.

        Args:
            status: Filter by approval status (optional)
            class_id: Filter by class (optional)
            state: Filter by state of origin (optional)
            gender: Filter by gender (optional)
            query: Case-insensitive match on first name, last name or email
            limit: Max results to return (None for all)
            offset: Offset for pagination

        Returns:
            Registrations ordered by created_at descending (most recent first)
        """
        session = self._db.get_session()
        try:
            stmt = select(Registration).join(
                ApprovalRecord, ApprovalRecord.registration_id == Registration.id
            )

            if status is not None:
                stmt = stmt.where(ApprovalRecord.status == status.value)
            if class_id is not None:
                stmt = stmt.where(Registration.class_id == class_id)
            if state is not None:
                stmt = stmt.where(Registration.state == state)
            if gender is not None:
                stmt = stmt.where(Registration.gender == gender)
            if query:
                pattern = f"%{query.lower()}%"
                stmt = stmt.where(
                    or_(
                        func.lower(Registration.first_name).like(pattern),
                        func.lower(Registration.last_name).like(pattern),
                        Registration.email.like(pattern),
                    )
                )

            stmt = stmt.order_by(Registration.created_at.desc()).offset(offset)
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(session.execute(stmt).unique().scalars().all())
        finally:
            session.close()

    def list_pending(self, limit: int = 100, offset: int = 0) -> list[Registration]:
        """List registrations awaiting review, most recent first."""
        return self.list_registrations(status=ApprovalStatus.PENDING, limit=limit, offset=offset)

    # --- Approval Operations ---

    def get_approval(self, registration_id: str) -> ApprovalRecord:
        """Get the approval record of a registration.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        session = self._db.get_session()
        try:
            stmt = select(ApprovalRecord).where(ApprovalRecord.registration_id == registration_id)
            approval = session.execute(stmt).scalar_one_or_none()
            if approval is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            return approval
        finally:
            session.close()

    def transition_approval(
        self,
        registration_id: str,
        target: ApprovalStatus,
        reviewer_id: str,
        comments: str | None = None,
        class_id: str | None = None,
        assign_number: bool = False,
        reviewed_at: datetime | None = None,
    ) -> Registration:
        """Move a pending approval record to ``target``.

        The status check and the mutation are one conditional UPDATE, so of
        two concurrent reviewers exactly one succeeds. Class assignment and
        admission number issue happen in the same transaction.

        Args:
            registration_id: The registration's unique ID
            target: APPROVED or REJECTED
            reviewer_id: ID of the reviewing admin
            comments: Review comments or rejection reason
            class_id: Class to assign before numbering (optional)
            assign_number: Issue an admission number if none is set yet
            reviewed_at: Decision time (defaults to the store clock)

        Returns:
            The updated Registration

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            ApprovalConflictError: If the record is no longer pending
            ClassNotFoundError: If class_id doesn't exist
            ClassRequiredError: If a number is needed but no class is set
            AdmissionNumberLockedError: If class_id differs from a numbered class
        """
        if target == ApprovalStatus.PENDING:
            raise ValueError("Cannot transition an approval back to pending")

        session = self._db.get_session()
        try:
            now = reviewed_at or self.now()
            result = session.execute(
                update(ApprovalRecord)
                .where(
                    ApprovalRecord.registration_id == registration_id,
                    ApprovalRecord.status == ApprovalStatus.PENDING.value,
                )
                .values(
                    status=target.value,
                    reviewer_id=reviewer_id,
                    reviewed_at=now,
                    comments=comments,
                )
            )
            if result.rowcount == 0:
                current = session.execute(
                    select(ApprovalRecord.status).where(
                        ApprovalRecord.registration_id == registration_id
                    )
                ).scalar_one_or_none()
                if current is None:
                    raise RegistrationNotFoundError(
                        f"Registration with id '{registration_id}' not found"
                    )
                raise ApprovalConflictError(registration_id, current)

            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )

            if class_id is not None and class_id != registration.class_id:
                if registration.admission_number is not None:
                    raise AdmissionNumberLockedError(
                        f"Registration '{registration_id}' is already numbered "
                        f"{registration.admission_number}"
                    )
                school_class = session.get(SchoolClass, class_id)
                if school_class is None:
                    raise ClassNotFoundError(f"Class with id '{class_id}' not found")
                registration.class_id = class_id
                registration.school_class = school_class

            if assign_number and registration.admission_number is None:
                if registration.school_class is None:
                    raise ClassRequiredError(
                        f"Registration '{registration_id}' has no class to number it in"
                    )
                registration.admission_number = self._generator.generate(
                    _SessionSequenceSource(session),
                    registration.school_class.class_code,
                    two_digit_year(now),
                )

            registration.updated_at = now
            session.commit()
            session.refresh(registration)
            return registration
        except IntegrityError as e:
            session.rollback()
            raise _classify_integrity_error(e, registration_id) from e
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryError(
                f"Could not update approval for '{registration_id}': {e}"
            ) from e
        finally:
            session.close()

    # --- Cleanup Operations ---

    def flag_orphaned_identity(
        self,
        identity_id: str,
        email: str,
        failed_step: str,
        reason: str,
    ) -> OrphanedIdentity:
        """Record an identity whose compensating delete failed."""
        session = self._db.get_session()
        try:
            orphan = OrphanedIdentity(
                identity_id=identity_id,
                email=email.lower(),
                failed_step=failed_step,
                reason=reason,
                created_at=self.now(),
            )
            session.add(orphan)
            session.commit()
            session.refresh(orphan)
            return orphan
        except SQLAlchemyError as e:
            session.rollback()
            raise RegistryError(f"Could not flag orphaned identity '{identity_id}': {e}") from e
        finally:
            session.close()

    def list_orphaned_identities(self) -> list[OrphanedIdentity]:
        """List identities flagged for manual cleanup, oldest first."""
        session = self._db.get_session()
        try:
            stmt = select(OrphanedIdentity).order_by(OrphanedIdentity.created_at)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()


def _classify_integrity_error(error: IntegrityError, subject: str) -> RegistryError:
    message = str(error)
    if "registrations.email" in message or "users.email" in message:
        return EmailExistsError(f"Email '{subject}' is already registered")
    if "admission_number" in message:
        return DuplicateAdmissionNumberError(f"Admission number collision for '{subject}'")
    return RegistryError(f"Integrity error for '{subject}': {error.orig}")
