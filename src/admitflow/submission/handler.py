"""RegistrationSubmissionHandler - validates and persists new registrations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC
from typing import TYPE_CHECKING, Any

import pydantic
from werkzeug.utils import secure_filename

from admitflow.config import AdmitFlowConfig
from admitflow.identity import IdentityError, IdentityExistsError, IdentityNotFoundError
from admitflow.logging import sanitize_for_log
from admitflow.regnumber import RegistrationNumberError
from admitflow.registry import (
    ClassNotFoundError,
    DocumentRecord,
    EmailExistsError,
    ProfileExistsError,
    RegistryError,
)
from admitflow.storage import StorageError, UploadError
from admitflow.submission.exceptions import (
    AuthError,
    DuplicateEmailError,
    FieldError,
    PersistenceError,
    ValidationError,
)
from admitflow.submission.schemas import (
    ALLOWED_CONTENT_TYPES,
    DocumentUpload,
    RegistrationPayload,
)

if TYPE_CHECKING:
    from admitflow.api.events import EventManager
    from admitflow.identity import IdentityProvider
    from admitflow.registry import RegistryStore
    from admitflow.storage import BlobStore

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Registration successful! Please wait for admin approval."
DOCUMENT_PREFIX = "student-documents"


@dataclass
class SubmissionResult:
    """Outcome of a successful submission."""

    registration_id: str
    user_id: str
    admission_number: str | None
    message: str = SUCCESS_MESSAGE
    failed_documents: list[str] = field(default_factory=list)


@dataclass
class _UploadedDocument:
    path: str
    record: DocumentRecord


class RegistrationSubmissionHandler:
    """Turns a submitted form into an identity, a profile and a pending registration.

    All validation runs before the first side effect. Once the identity
    exists, any failure to write the profile or the registration undoes what
    was created so no identity is left without a profile.
    """

    def __init__(
        self,
        store: RegistryStore,
        identity_provider: IdentityProvider,
        blob_store: BlobStore,
        config: AdmitFlowConfig | None = None,
        event_manager: EventManager | None = None,
    ) -> None:
        self.store = store
        self.identity_provider = identity_provider
        self.blob_store = blob_store
        self.config = config or AdmitFlowConfig()
        self.event_manager = event_manager

    def submit_registration(
        self, payload: RegistrationPayload | Mapping[str, Any]
    ) -> SubmissionResult:
        """Validate and persist a registration.

        Args:
            payload: The form, either already parsed or as raw field values

        Returns:
            SubmissionResult with the admission number (None until a class is known)

        Raises:
            ValidationError: If any field or document is invalid
            DuplicateEmailError: If the email is already registered
            AuthError: If the identity provider rejects the account
            PersistenceError: If the profile or registration could not be written
        """
        form = self._validate(payload)
        email = str(form.email).lower()

        if self.store.email_exists(email):
            raise DuplicateEmailError(f"Email '{email}' is already registered")

        try:
            user_id = self.identity_provider.create_identity(email, form.password)
        except IdentityExistsError as e:
            raise DuplicateEmailError(f"Email '{email}' is already registered") from e
        except IdentityError as e:
            logger.warning("Identity creation failed for %s: %s", email, sanitize_for_log(str(e)))
            raise AuthError(str(e)) from e

        full_name = f"{form.first_name} {form.last_name}"
        created_profile = False
        try:
            self.store.create_user_profile(user_id, email, full_name)
            created_profile = True
        except ProfileExistsError:
            logger.info("Profile for %s already exists, reusing it", user_id)
        except RegistryError as e:
            rolled_back = self._rollback_identity(user_id, email, "profile", str(e))
            if isinstance(e, EmailExistsError):
                raise DuplicateEmailError(f"Email '{email}' is already registered") from e
            raise PersistenceError(
                f"Failed to create user profile: {e}",
                step="profile",
                identity_id=user_id,
                rolled_back=rolled_back,
            ) from e

        uploads = [self._upload(user_id, document) for document in form.documents]

        try:
            registration = self.store.create_registration(
                user_id=user_id,
                email=email,
                profile=form.profile_fields(),
                class_id=form.class_id,
                documents=[upload.record for upload in uploads],
            )
        except (RegistryError, RegistrationNumberError) as e:
            self._discard_uploads(uploads)
            if created_profile:
                self._discard_profile(user_id)
            rolled_back = self._rollback_identity(user_id, email, "registration", str(e))
            if isinstance(e, EmailExistsError):
                raise DuplicateEmailError(f"Email '{email}' is already registered") from e
            raise PersistenceError(
                f"Failed to create registration: {e}",
                step="registration",
                identity_id=user_id,
                rolled_back=rolled_back,
            ) from e

        failed = [u.record.slot for u in uploads if u.record.upload_error is not None]
        logger.info(
            "Registration %s submitted for %s (%d document(s), %d failed)",
            registration.id,
            email,
            len(uploads),
            len(failed),
        )

        if self.event_manager is not None:
            self.event_manager.emit_registration_submitted(
                registration_id=registration.id,
                email=email,
                class_id=registration.class_id,
                admission_number=registration.admission_number,
            )

        return SubmissionResult(
            registration_id=registration.id,
            user_id=user_id,
            admission_number=registration.admission_number,
            failed_documents=failed,
        )

    def _validate(self, payload: RegistrationPayload | Mapping[str, Any]) -> RegistrationPayload:
        if isinstance(payload, RegistrationPayload):
            form = payload
        else:
            try:
                form = RegistrationPayload.model_validate(dict(payload))
            except pydantic.ValidationError as e:
                raise ValidationError(
                    [
                        FieldError(
                            field=".".join(str(part) for part in err["loc"]) or "payload",
                            message=err["msg"],
                        )
                        for err in e.errors()
                    ]
                ) from e

        errors: list[FieldError] = []
        if len(form.password) < self.config.min_password_length:
            errors.append(
                FieldError(
                    "password",
                    f"Password must be at least {self.config.min_password_length} characters",
                )
            )
        errors.extend(self._check_documents(form.documents))

        if form.class_id is not None:
            try:
                self.store.get_class(form.class_id)
            except ClassNotFoundError:
                errors.append(FieldError("class_id", "Selected class does not exist"))

        if errors:
            raise ValidationError(errors)
        return form

    def _check_documents(self, documents: list[DocumentUpload]) -> list[FieldError]:
        errors: list[FieldError] = []
        seen: set[str] = set()
        limit_mb = self.config.max_upload_bytes / (1024 * 1024)
        for index, document in enumerate(documents):
            where = f"documents.{index}"
            if document.slot in seen:
                errors.append(FieldError(where, f"More than one {document.slot} document"))
            seen.add(document.slot)
            if document.size_bytes == 0:
                errors.append(FieldError(where, f"{document.filename} is empty"))
            if document.size_bytes > self.config.max_upload_bytes:
                errors.append(
                    FieldError(where, f"{document.filename} must be less than {limit_mb:g}MB")
                )
            allowed = ALLOWED_CONTENT_TYPES[document.slot]
            if document.content_type not in allowed:
                errors.append(
                    FieldError(
                        where,
                        f"{document.slot} must be one of {', '.join(sorted(allowed))}",
                    )
                )
        return errors

    def _upload(self, user_id: str, document: DocumentUpload) -> _UploadedDocument:
        """Upload one document; failures are recorded, never raised."""
        timestamp = int(self.store.now().replace(tzinfo=UTC).timestamp() * 1000)
        name = secure_filename(document.filename) or "upload"
        path = f"{DOCUMENT_PREFIX}/{user_id}/{document.slot}_{timestamp}_{name}"
        record = DocumentRecord(
            slot=str(document.slot),
            filename=document.filename,
            content_type=document.content_type,
            size_bytes=document.size_bytes,
        )
        try:
            record.url = self.blob_store.upload(path, document.content, document.content_type)
        except UploadError as e:
            logger.warning("Upload of %s for %s failed: %s", document.slot, user_id, e)
            record.upload_error = str(e)
        return _UploadedDocument(path=path, record=record)

    def _discard_uploads(self, uploads: list[_UploadedDocument]) -> None:
        for upload in uploads:
            if upload.record.url is None:
                continue
            try:
                self.blob_store.delete(upload.path)
            except (StorageError, OSError) as e:
                logger.warning("Could not delete uploaded blob %s: %s", upload.path, e)

    def _discard_profile(self, user_id: str) -> None:
        try:
            self.store.delete_user_profile(user_id)
        except RegistryError as e:
            logger.error("Could not delete profile %s during rollback: %s", user_id, e)

    def _rollback_identity(self, user_id: str, email: str, step: str, reason: str) -> bool:
        """Delete the identity created for a failed submission.

        Returns:
            True if the identity is gone, False if it was flagged for cleanup
        """
        try:
            self.identity_provider.delete_identity(user_id)
        except IdentityNotFoundError:
            return True
        except IdentityError as e:
            logger.error(
                "Rollback of identity %s after failed %s step failed: %s", user_id, step, e
            )
            try:
                self.store.flag_orphaned_identity(
                    identity_id=user_id,
                    email=email,
                    failed_step=step,
                    reason=f"{reason}; rollback failed: {e}",
                )
            except RegistryError as flag_error:
                logger.critical(
                    "Identity %s (%s) is orphaned and could not be flagged: %s",
                    user_id,
                    email,
                    flag_error,
                )
            return False
        logger.info("Rolled back identity %s after failed %s step", user_id, step)
        return True
