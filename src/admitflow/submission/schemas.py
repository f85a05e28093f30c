"""Pydantic models for registration submissions."""

from __future__ import annotations

import re
from datetime import date
from typing import Literal

from pydantic import (
    Base64Bytes,
    BaseModel,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)

from admitflow.registry.models import DocumentSlot

NIGERIAN_STATES = (
    "Abia",
    "Adamawa",
    "Akwa Ibom",
    "Anambra",
    "Bauchi",
    "Bayelsa",
    "Benue",
    "Borno",
    "Cross River",
    "Delta",
    "Ebonyi",
    "Edo",
    "Ekiti",
    "Enugu",
    "Federal Capital Territory",
    "Gombe",
    "Imo",
    "Jigawa",
    "Kaduna",
    "Kano",
    "Katsina",
    "Kebbi",
    "Kogi",
    "Kwara",
    "Lagos",
    "Nasarawa",
    "Niger",
    "Ogun",
    "Ondo",
    "Osun",
    "Oyo",
    "Plateau",
    "Rivers",
    "Sokoto",
    "Taraba",
    "Yobe",
    "Zamfara",
)

Gender = Literal["Male", "Female", "Other"]
GuardianRelationship = Literal[
    "Father", "Mother", "Guardian", "Sister", "Brother", "Aunt", "Uncle", "Other"
]

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}

# Content types accepted per document slot
ALLOWED_CONTENT_TYPES: dict[DocumentSlot, frozenset[str]] = {
    DocumentSlot.PHOTO: IMAGE_TYPES,
    DocumentSlot.BIRTH_CERTIFICATE: DOCUMENT_TYPES,
    DocumentSlot.ID_PROOF: DOCUMENT_TYPES,
}

MIN_AGE = 5
MAX_AGE = 25

PHONE_PATTERN = r"^[\d\s\-+()]+$"
_PASSWORD_CLASSES = (
    (re.compile(r"[a-z]"), "a lowercase letter"),
    (re.compile(r"[A-Z]"), "an uppercase letter"),
    (re.compile(r"\d"), "a number"),
)


class DocumentUpload(BaseModel):
    """A document attached to a submission, content base64-encoded."""

    slot: DocumentSlot
    filename: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=100)
    content: Base64Bytes

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class RegistrationPayload(BaseModel):
    """Submitted registration form."""

    # Account
    email: EmailStr
    password: str = Field(..., min_length=1)
    confirm_password: str | None = None

    # Personal
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    gender: Gender
    date_of_birth: date

    # Contact
    phone: str = Field(..., min_length=10, max_length=40, pattern=PHONE_PATTERN)
    address: str = Field(..., min_length=5, max_length=255)
    state: str
    lga: str = Field(..., min_length=2, max_length=100)

    # Guardian
    guardian_name: str = Field(..., min_length=2, max_length=100)
    guardian_phone: str = Field(..., min_length=10, max_length=40, pattern=PHONE_PATTERN)
    guardian_email: EmailStr
    guardian_relationship: GuardianRelationship

    # Academic
    class_id: str | None = None
    previous_school: str | None = Field(default=None, max_length=255)

    documents: list[DocumentUpload] = Field(default_factory=list)

    @field_validator("first_name", "last_name", "address", "lga", "guardian_name")
    @classmethod
    def strip_required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value

    @field_validator("class_id", "previous_school")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        missing = [label for pattern, label in _PASSWORD_CLASSES if not pattern.search(value)]
        if missing:
            raise ValueError(f"Password must contain {', '.join(missing)}")
        return value

    @field_validator("state")
    @classmethod
    def known_state(cls, value: str) -> str:
        if value not in NIGERIAN_STATES:
            raise ValueError("Please select a valid state")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def plausible_age(cls, value: date) -> date:
        age = date.today().year - value.year
        if not MIN_AGE <= age <= MAX_AGE:
            raise ValueError(f"Student should be between {MIN_AGE}-{MAX_AGE} years old")
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str | None, info: ValidationInfo) -> str | None:
        password = info.data.get("password")
        if value is not None and password is not None and value != password:
            raise ValueError("Passwords do not match")
        return value

    def profile_fields(self) -> dict[str, object]:
        """Fields persisted on the registration row."""
        return self.model_dump(
            exclude={"email", "password", "confirm_password", "class_id", "documents"}
        )
