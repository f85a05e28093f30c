"""Formatting and parsing of registration numbers.

A registration number looks like ``ELBA/25/SS3B/011``: school code, two-digit
admission year, class code and a three-digit sequence within the
(year, class code) bucket.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from admitflow.regnumber.exceptions import (
    InvalidComponentError,
    InvalidRegistrationNumberError,
    SequenceExhaustedError,
)

REG_NUMBER_PATTERN = re.compile(r"^([A-Z]{3,4})/(\d{2})/([A-Z0-9]{2,5})/(\d{3})$")
SCHOOL_CODE_PATTERN = re.compile(r"^[A-Z]{3,4}$")
CLASS_CODE_PATTERN = re.compile(r"^[A-Z0-9]{2,5}$")
MAX_SEQUENCE = 999


@dataclass(frozen=True)
class RegistrationNumber:
    """Decoded registration number components."""

    school_code: str
    year: int
    class_code: str
    sequence: int

    def __str__(self) -> str:
        return format_registration_number(
            self.school_code, self.year, self.class_code, self.sequence
        )


def format_registration_number(
    school_code: str,
    year: int,
    class_code: str,
    sequence: int,
) -> str:
    """Build a registration number from its components.

    Args:
        school_code: Three or four upper-case letters, e.g. "ELBA".
        year: Two-digit admission year (0-99).
        class_code: Two to five upper-case letters/digits, e.g. "SS3B".
        sequence: Position within the (year, class_code) bucket, 1-999.

    Returns:
        The formatted number, e.g. "ELBA/25/SS3B/011".

    Raises:
        InvalidComponentError: If a component cannot appear in a valid number.
        SequenceExhaustedError: If sequence is above 999.
    """
    if not SCHOOL_CODE_PATTERN.match(school_code):
        raise InvalidComponentError(f"Invalid school code: {school_code!r}")
    if not 0 <= year <= 99:
        raise InvalidComponentError(f"Year must be two digits, got {year}")
    if not CLASS_CODE_PATTERN.match(class_code):
        raise InvalidComponentError(f"Invalid class code: {class_code!r}")
    if sequence < 1:
        raise InvalidComponentError(f"Sequence must be positive, got {sequence}")
    if sequence > MAX_SEQUENCE:
        raise SequenceExhaustedError(
            f"Bucket {year:02d}/{class_code} has no sequence numbers left"
        )
    return f"{school_code}/{year:02d}/{class_code}/{sequence:03d}"


def parse_registration_number(text: str) -> RegistrationNumber:
    """Decode a registration number.

    Raises:
        InvalidRegistrationNumberError: If text doesn't match the canonical pattern.
    """
    match = REG_NUMBER_PATTERN.match(text)
    if match is None:
        raise InvalidRegistrationNumberError(f"Invalid registration number: {text!r}")
    school_code, year, class_code, sequence = match.groups()
    if int(sequence) == 0:
        raise InvalidRegistrationNumberError(f"Sequence 000 is never issued: {text!r}")
    return RegistrationNumber(
        school_code=school_code,
        year=int(year),
        class_code=class_code,
        sequence=int(sequence),
    )


def is_valid_registration_number(text: str) -> bool:
    """Check text against the canonical registration number pattern."""
    try:
        parse_registration_number(text)
    except InvalidRegistrationNumberError:
        return False
    return True
