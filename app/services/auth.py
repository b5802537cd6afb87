"""Registration and login flows: credential lookup, password checks and token issuance."""

import logging
from dataclasses import dataclass
from datetime import datetime

from app.core.security import TokenCodec, dummy_password_hash, hash_password, verify_password
from app.models.user import Role, User
from app.schemas.auth import Claims
from app.services.credential_store import CredentialConflictError, CredentialStore

logger = logging.getLogger(__name__)


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""

    def __init__(self, message: str = "Username is already taken") -> None:
        self.message = message
        super().__init__(message)


class EmailTakenError(Exception):
    """Raised when registering an email that already exists."""

    def __init__(self, message: str = "Email is already in use") -> None:
        self.message = message
        super().__init__(message)


class InvalidCredentialsError(Exception):
    """Raised for unknown username or wrong password (deliberately the same error)."""

    def __init__(self, message: str = "Invalid username or password") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class LoginResult:
    """Issued token plus the account it was issued for."""

    token: str
    claims: Claims
    user: User


def register_user(store: CredentialStore, username: str, email: str, password: str) -> User:
    """
    Create a new account with role USER. No token is issued.

    Raises UsernameTakenError or EmailTakenError on collision.
    """
    if store.username_exists(username):
        logger.info("Registration rejected: username taken", extra={"username": username})
        raise UsernameTakenError()
    if store.email_exists(email):
        logger.info("Registration rejected: email taken", extra={"username": username})
        raise EmailTakenError()

    try:
        user = store.create(username, email, hash_password(password), role=Role.USER)
    except CredentialConflictError as e:
        # Lost a race with a concurrent registration.
        if e.field == "username":
            raise UsernameTakenError() from e
        raise EmailTakenError() from e

    logger.info("User registered", extra={"user_id": user.id, "username": user.username})
    return user


def login(
    store: CredentialStore,
    codec: TokenCodec,
    username: str,
    password: str,
    now: datetime | None = None,
) -> LoginResult:
    """
    Verify credentials and issue a token bound to the user's id and current role.

    Unknown user and wrong password both raise InvalidCredentialsError, and
    both pay for one bcrypt verification.
    """
    user = store.find_by_username(username)
    if user is None:
        verify_password(password, dummy_password_hash())
        logger.info("Login failed", extra={"username": username})
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed", extra={"username": username})
        raise InvalidCredentialsError()

    token, claims = codec.issue(user.id, user.role, now=now)
    logger.info("Login succeeded", extra={"user_id": user.id, "username": user.username})
    return LoginResult(token=token, claims=claims, user=user)
