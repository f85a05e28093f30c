"""Registration numbers - format, parse and generate SCHOOL/YY/CLASS/SEQ identifiers."""

from admitflow.regnumber.exceptions import (
    InvalidComponentError,
    InvalidRegistrationNumberError,
    RegistrationNumberError,
    SequenceExhaustedError,
)
from admitflow.regnumber.format import (
    CLASS_CODE_PATTERN,
    MAX_SEQUENCE,
    REG_NUMBER_PATTERN,
    RegistrationNumber,
    format_registration_number,
    is_valid_registration_number,
    parse_registration_number,
)
from admitflow.regnumber.generator import (
    RegistrationNumberGenerator,
    SequenceSource,
    two_digit_year,
)

__all__ = [
    "CLASS_CODE_PATTERN",
    "InvalidComponentError",
    "InvalidRegistrationNumberError",
    "MAX_SEQUENCE",
    "REG_NUMBER_PATTERN",
    "RegistrationNumber",
    "RegistrationNumberError",
    "RegistrationNumberGenerator",
    "SequenceExhaustedError",
    "SequenceSource",
    "format_registration_number",
    "is_valid_registration_number",
    "parse_registration_number",
    "two_digit_year",
]
