"""Resolve the principal for a request from a presented bearer token."""

import logging
from datetime import datetime

from app.core.security import REASON_INVALID_CLAIMS, TokenCodec, TokenError
from app.schemas.auth import Principal
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

REASON_MISSING = "missing_token"
REASON_UNKNOWN_USER = "unknown_user"


class UnauthenticatedError(Exception):
    """Raised when a request carries no usable identity. reason tells clients why."""

    def __init__(self, message: str, reason: str) -> None:
        self.message = message
        self.reason = reason
        super().__init__(message)


def resolve_principal(
    token: str | None,
    codec: TokenCodec,
    store: CredentialStore,
    now: datetime | None = None,
) -> Principal:
    """
    Verify token and return the principal it identifies.

    The role comes from the token, so a role change only applies after the
    user logs in again. The subject must still exist: a valid token for a
    deleted user is rejected with reason 'unknown_user'.
    """
    if not token:
        raise UnauthenticatedError("Not authenticated", REASON_MISSING)

    try:
        claims = codec.verify(token, now=now)
    except TokenError as e:
        logger.info("Token rejected", extra={"reason": e.reason})
        raise UnauthenticatedError(e.message, e.reason) from e

    try:
        user_id = int(claims.subject)
    except ValueError as e:
        raise UnauthenticatedError("Invalid token payload", REASON_INVALID_CLAIMS) from e

    user = store.find_by_id(user_id)
    if user is None:
        logger.warning("Token subject no longer exists", extra={"user_id": user_id})
        raise UnauthenticatedError("User not found", REASON_UNKNOWN_USER)

    return Principal(id=user.id, username=user.username, role=claims.role)
