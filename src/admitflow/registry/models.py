"""SQLAlchemy models for the Registry."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    PrimaryKeyConstraint,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class ApprovalStatus(StrEnum):
    """Approval record status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentSlot(StrEnum):
    """Kinds of document an applicant can attach."""

    PHOTO = "photo"
    BIRTH_CERTIFICATE = "birth_certificate"
    ID_PROOF = "id_proof"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as naive UTC, the form SQLite stores."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class SchoolClass(Base):
    """A class/form level students are admitted into."""

    __tablename__ = "classes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    class_code: Mapped[str] = mapped_column(String(5), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    def __init__(self, name: str, class_code: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.class_code = class_code

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id!r}, class_code={self.class_code!r})>"


class Identity(Base):
    """Login identity held by the local identity provider."""

    __tablename__ = "identities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    def __init__(self, email: str, password_hash: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.email = email
        self.password_hash = password_hash

    def __repr__(self) -> str:
        return f"<Identity(id={self.id!r}, email={self.email!r})>"


class UserProfile(Base):
    """Portal user record linked 1:1 to an identity."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id!r}, email={self.email!r}, role={self.role!r})>"


class Registration(Base):
    """A prospective student's submitted profile."""

    __tablename__ = "registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    lga: Mapped[str] = mapped_column(String(100), nullable=False)
    guardian_name: Mapped[str] = mapped_column(String(100), nullable=False)
    guardian_phone: Mapped[str] = mapped_column(String(40), nullable=False)
    guardian_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guardian_relationship: Mapped[str] = mapped_column(String(20), nullable=False)
    previous_school: Mapped[str | None] = mapped_column(String(255), nullable=True)
    class_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("classes.id"), nullable=True
    )
    admission_number: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    school_class: Mapped[SchoolClass | None] = relationship("SchoolClass", lazy="joined")
    approval: Mapped[ApprovalRecord] = relationship(
        "ApprovalRecord",
        back_populates="registration",
        uselist=False,
        lazy="joined",
        cascade="all, delete-orphan",
    )
    documents: Mapped[list[RegistrationDocument]] = relationship(
        "RegistrationDocument",
        back_populates="registration",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __init__(
        self,
        user_id: str,
        email: str,
        first_name: str,
        last_name: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.user_id = user_id
        self.email = email
        self.first_name = first_name
        self.last_name = last_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def status(self) -> ApprovalStatus:
        """Status of the paired approval record."""
        return ApprovalStatus(self.approval.status)

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id!r}, email={self.email!r}, "
            f"admission_number={self.admission_number!r})>"
        )


class RegistrationDocument(Base):
    """A document attached to a registration.

    A failed upload is kept with ``url`` NULL and the error recorded, so the
    omission is visible to reviewers.
    """

    __tablename__ = "registration_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    registration_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("registrations.id"), nullable=False
    )
    slot: Mapped[str] = mapped_column(String(20), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    upload_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    registration: Mapped[Registration] = relationship("Registration", back_populates="documents")

    @property
    def uploaded(self) -> bool:
        return self.url is not None

    def __repr__(self) -> str:
        return f"<RegistrationDocument(slot={self.slot!r}, uploaded={self.uploaded!r})>"


class ApprovalRecord(Base):
    """Review outcome of a registration, 1:1 with Registration."""

    __tablename__ = "student_approvals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    registration_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("registrations.id"), nullable=False, unique=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApprovalStatus.PENDING.value
    )
    reviewer_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    registration: Mapped[Registration] = relationship("Registration", back_populates="approval")

    @property
    def approval_status(self) -> ApprovalStatus:
        """Get status as ApprovalStatus enum."""
        return ApprovalStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<ApprovalRecord(registration_id={self.registration_id!r}, status={self.status!r})>"
        )


class SequenceCounter(Base):
    """Last sequence number issued in a (year, class_code) bucket."""

    __tablename__ = "registration_sequences"
    __table_args__ = (PrimaryKeyConstraint("year", "class_code"),)

    year: Mapped[int] = mapped_column(Integer, nullable=False)
    class_code: Mapped[str] = mapped_column(String(5), nullable=False)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<SequenceCounter({self.year:02d}/{self.class_code}={self.value})>"


class OrphanedIdentity(Base):
    """Identity whose compensating delete failed, kept for manual cleanup."""

    __tablename__ = "orphaned_identities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    identity_id: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    failed_step: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<OrphanedIdentity(identity_id={self.identity_id!r}, step={self.failed_step!r})>"


@dataclass
class DocumentRecord:
    """Outcome of one document upload, persisted with the registration."""

    slot: str
    filename: str
    content_type: str
    size_bytes: int
    url: str | None = None
    upload_error: str | None = None
