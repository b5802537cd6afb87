"""Password hashing and JWT issuance/verification for authentication."""

import json
import secrets
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from jwt.algorithms import get_default_algorithms
from jwt.utils import base64url_decode

from app.core.config import get_settings
from app.models.user import Role
from app.schemas.auth import Claims

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128

# Token rejection reasons, surfaced to clients in 401 responses.
REASON_MALFORMED = "malformed_token"
REASON_INVALID_SIGNATURE = "invalid_signature"
REASON_EXPIRED = "token_expired"
REASON_INVALID_CLAIMS = "invalid_claims"

_REQUIRED_CLAIMS = ["sub", "role", "iat", "exp"]


def _password_bytes(plain_password: str) -> bytes:
    # bcrypt only uses the first 72 bytes; newer releases raise beyond that.
    return plain_password.encode("utf-8")[:72]


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage with a fresh salt. Do not store plain passwords."""
    if rounds is None:
        rounds = get_settings().BCRYPT_ROUNDS
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Never raises on mismatch."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """
    Hash used to burn one bcrypt verification when the user does not exist,
    so unknown usernames and wrong passwords take the same time.
    """
    return hash_password(secrets.token_urlsafe(16))


class TokenError(Exception):
    """Raised when a presented token cannot be accepted. reason is one of the REASON_* tags."""

    def __init__(self, message: str, reason: str) -> None:
        self.message = message
        self.reason = reason
        super().__init__(message)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


class TokenCodec:
    """
    Signs claims into a compact JWT and verifies them back.

    The key is fixed for the lifetime of the codec. The signature is checked
    over the encoded header.payload bytes before any claim is decoded, using
    PyJWT's HMAC algorithm (hmac.compare_digest).
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(hours=1)) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        if ttl <= timedelta(0):
            raise ValueError("Token TTL must be positive")
        self._secret = secret
        self._algorithm = algorithm
        self._signer = get_default_algorithms()[algorithm]
        self._key = self._signer.prepare_key(secret)
        self.ttl = ttl

    def issue(self, subject: str | int, role: Role, now: datetime | None = None) -> tuple[str, Claims]:
        """Create a signed token for subject and role, valid from now until now + ttl."""
        # JWT timestamps are whole seconds; truncate so the returned claims match what verify() yields.
        issued_at = _as_utc(now or datetime.now(UTC)).replace(microsecond=0)
        claims = Claims(
            subject=str(subject),
            role=role,
            issued_at=issued_at,
            expires_at=issued_at + self.ttl,
        )
        payload: dict[str, Any] = {
            "sub": claims.subject,
            "role": claims.role.value,
            "iat": claims.issued_at,
            "exp": claims.expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, claims

    def _check_signature(self, token: str) -> None:
        """
        Verify the signature over the raw header.payload segments.

        Only an unsplittable token or an unreadable header counts as
        malformed; any change to the claims segment is a bad signature.
        """
        try:
            raw = token.encode("utf-8")
        except UnicodeEncodeError as e:
            raise TokenError("Token is malformed", REASON_MALFORMED) from e
        if raw.count(b".") < 2:
            raise TokenError("Token is malformed", REASON_MALFORMED)
        # Same split as PyJWS: header up to the first dot, signature after the last.
        signing_input, signature_segment = raw.rsplit(b".", 1)
        header_segment = signing_input.split(b".", 1)[0]
        try:
            header = json.loads(base64url_decode(header_segment))
        except ValueError as e:
            raise TokenError("Token header is malformed", REASON_MALFORMED) from e
        if not isinstance(header, dict):
            raise TokenError("Token header is malformed", REASON_MALFORMED)
        if header.get("alg") != self._algorithm:
            raise TokenError("Token algorithm is not accepted", REASON_INVALID_SIGNATURE)
        try:
            signature = base64url_decode(signature_segment)
        except ValueError as e:
            raise TokenError("Token signature is invalid", REASON_INVALID_SIGNATURE) from e
        if not self._signer.verify(signing_input, self._key, signature):
            raise TokenError("Token signature is invalid", REASON_INVALID_SIGNATURE)

    def verify(self, token: str, now: datetime | None = None) -> Claims:
        """
        Check the signature and expiry of token and return its claims.

        Raises TokenError if the token is malformed, the signature does not
        match, a claim is missing or invalid, or now >= expires_at.
        """
        self._check_signature(token)
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenError("Token signature is invalid", REASON_INVALID_SIGNATURE) from e
        except jwt.MissingRequiredClaimError as e:
            raise TokenError(f"Token is missing claim '{e.claim}'", REASON_INVALID_CLAIMS) from e
        except jwt.PyJWTError as e:
            raise TokenError("Token is malformed", REASON_MALFORMED) from e

        try:
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise TokenError("Token claims are invalid", REASON_INVALID_CLAIMS) from e

        # Expiry is checked here rather than by PyJWT so the clock can be injected.
        if _as_utc(now or datetime.now(UTC)) >= expires_at:
            raise TokenError("Token has expired", REASON_EXPIRED)

        return Claims(
            subject=str(payload["sub"]),
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )


@lru_cache
def get_token_codec() -> TokenCodec:
    """
    Return the process-wide codec. The signing key is read (or generated, in
    dev) once here and never rotated while the process runs.
    """
    settings = get_settings()
    if settings.JWT_SECRET is not None:
        secret = settings.JWT_SECRET.get_secret_value()
    else:
        secret = secrets.token_urlsafe(64)
    return TokenCodec(
        secret,
        algorithm=settings.JWT_ALGORITHM,
        ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    )
