"""Registration number generator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from admitflow.config import DEFAULT_SCHOOL_CODE
from admitflow.regnumber.exceptions import InvalidComponentError
from admitflow.regnumber.format import (
    CLASS_CODE_PATTERN,
    SCHOOL_CODE_PATTERN,
    format_registration_number,
)

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)


class SequenceSource(Protocol):
    """Hands out the next sequence number of a (year, class_code) bucket.

    Implementations must be atomic: two callers never receive the same value
    for the same bucket.
    """

    def next_sequence(self, year: int, class_code: str) -> int:
        """Reserve and return the next sequence number for the bucket."""
        ...


def two_digit_year(moment: datetime) -> int:
    """Return the last two digits of the year of ``moment``."""
    return moment.year % 100


class RegistrationNumberGenerator:
    """Produces unique registration numbers for one school.

    The generator only formats; uniqueness comes from the SequenceSource,
    which must reserve numbers atomically.
    """

    def __init__(self, school_code: str = DEFAULT_SCHOOL_CODE) -> None:
        if not SCHOOL_CODE_PATTERN.match(school_code):
            raise InvalidComponentError(f"Invalid school code: {school_code!r}")
        self.school_code = school_code

    def generate(self, sequences: SequenceSource, class_code: str, year: int) -> str:
        """Reserve the next number in the (year, class_code) bucket.

        Args:
            sequences: Atomic source of per-bucket sequence numbers.
            class_code: Class code of the bucket, e.g. "SS3B".
            year: Two-digit admission year.

        Returns:
            The formatted registration number.

        Raises:
            InvalidComponentError: If class_code or year cannot be formatted.
            SequenceExhaustedError: If the bucket is full.
        """
        # Validate before reserving so a bad class code never burns a sequence.
        if not CLASS_CODE_PATTERN.match(class_code):
            raise InvalidComponentError(f"Invalid class code: {class_code!r}")
        if not 0 <= year <= 99:
            raise InvalidComponentError(f"Year must be two digits, got {year}")

        sequence = sequences.next_sequence(year, class_code)
        number = format_registration_number(self.school_code, year, class_code, sequence)
        logger.debug("Generated registration number %s", number)
        return number
