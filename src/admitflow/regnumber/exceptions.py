"""Custom exceptions for registration number handling."""


class RegistrationNumberError(Exception):
    """Base exception for registration number errors."""


class InvalidRegistrationNumberError(RegistrationNumberError):
    """Text does not match the canonical registration number pattern."""


class InvalidComponentError(RegistrationNumberError):
    """School code, year or class code cannot be formatted."""


class SequenceExhaustedError(RegistrationNumberError):
    """The bucket has used every three-digit sequence number."""
