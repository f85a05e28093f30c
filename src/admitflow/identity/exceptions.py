"""Custom exceptions for identity providers."""


class IdentityError(Exception):
    """Base exception for identity provider errors."""


class IdentityExistsError(IdentityError):
    """An identity with this email already exists."""


class IdentityNotFoundError(IdentityError):
    """Identity with given ID does not exist."""


class InvalidCredentialsError(IdentityError):
    """Email and password do not match an identity."""
