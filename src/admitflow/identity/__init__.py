"""Identity providers - create, verify and delete login identities."""

from admitflow.identity.base import IdentityProvider
from admitflow.identity.exceptions import (
    IdentityError,
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
)
from admitflow.identity.local import LocalIdentityProvider
from admitflow.identity.supabase import SupabaseIdentityProvider

__all__ = [
    "IdentityError",
    "IdentityExistsError",
    "IdentityNotFoundError",
    "IdentityProvider",
    "InvalidCredentialsError",
    "LocalIdentityProvider",
    "SupabaseIdentityProvider",
]
