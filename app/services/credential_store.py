"""User lookup and uniqueness-enforcing creation on top of the users table."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import Role, User

logger = logging.getLogger(__name__)


class CredentialConflictError(Exception):
    """Raised when a user cannot be created because username or email is already taken."""

    def __init__(self, message: str, field: str) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class CredentialStore:
    """
    Query contract over persisted users.

    Uniqueness of username and email is ultimately enforced by the UNIQUE
    indexes on the table, so two concurrent creators cannot both succeed.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def username_exists(self, username: str) -> bool:
        return self.session.query(User.id).filter(User.username == username).first() is not None

    def email_exists(self, email: str) -> bool:
        return self.session.query(User.id).filter(User.email == email).first() is not None

    def find_by_username(self, username: str) -> User | None:
        return self.session.query(User).filter(User.username == username).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def list_users(self) -> list[User]:
        return self.session.query(User).order_by(User.id).all()

    def create(self, username: str, email: str, password_hash: str, role: Role = Role.USER) -> User:
        """
        Insert a new user and commit.

        Raises CredentialConflictError(field="username"|"email") when either
        value is already present, including when a concurrent insert wins
        the race between the existence check and this insert. Any other
        IntegrityError is re-raised unchanged.
        """
        user = User(username=username, email=email, password_hash=password_hash, role=role)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            field = self._conflicting_field(username, email)
            if field is None:
                # Not a uniqueness clash (e.g. a NOT NULL column); nothing to map.
                raise
            logger.info("User create conflict", extra={"field": field})
            raise CredentialConflictError(f"{field.capitalize()} is already taken", field) from e
        self.session.refresh(user)
        return user

    def _conflicting_field(self, username: str, email: str) -> str | None:
        if self.username_exists(username):
            return "username"
        if self.email_exists(email):
            return "email"
        return None
