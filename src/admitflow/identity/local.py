"""LocalIdentityProvider - identities stored in the registry database."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from admitflow.identity.exceptions import (
    IdentityError,
    IdentityExistsError,
    IdentityNotFoundError,
    InvalidCredentialsError,
)
from admitflow.registry.models import Identity

if TYPE_CHECKING:
    from admitflow.registry.database import Database

logger = logging.getLogger(__name__)


class LocalIdentityProvider:
    """Identity provider backed by the ``identities`` table.

    Passwords are stored as werkzeug salted hashes; the plain password never
    reaches the database or the logs.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._db.create_tables()

    def create_identity(self, email: str, password: str) -> str:
        """Create an identity.

        Raises:
            IdentityExistsError: If the email is already taken
        """
        email = email.lower()
        session = self._db.get_session()
        try:
            identity = Identity(email=email, password_hash=generate_password_hash(password))
            session.add(identity)
            session.commit()
            logger.info("Created local identity %s", identity.id)
            return identity.id
        except IntegrityError as e:
            session.rollback()
            raise IdentityExistsError(f"Identity for '{email}' already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise IdentityError(f"Could not create identity for '{email}': {e}") from e
        finally:
            session.close()

    def verify_credentials(self, email: str, password: str) -> str:
        """Check a password against the stored hash.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        session = self._db.get_session()
        try:
            stmt = select(Identity).where(Identity.email == email.lower())
            identity = session.execute(stmt).scalar_one_or_none()
            if identity is None or not check_password_hash(identity.password_hash, password):
                raise InvalidCredentialsError("Invalid email or password")
            return identity.id
        except SQLAlchemyError as e:
            raise IdentityError(f"Could not verify credentials: {e}") from e
        finally:
            session.close()

    def delete_identity(self, identity_id: str) -> None:
        """Delete an identity.

        Raises:
            IdentityNotFoundError: If identity doesn't exist
        """
        session = self._db.get_session()
        try:
            identity = session.get(Identity, identity_id)
            if identity is None:
                raise IdentityNotFoundError(f"Identity with id '{identity_id}' not found")
            session.delete(identity)
            session.commit()
            logger.info("Deleted local identity %s", identity_id)
        except SQLAlchemyError as e:
            session.rollback()
            raise IdentityError(f"Could not delete identity '{identity_id}': {e}") from e
        finally:
            session.close()
