"""Registration, JWT login and auth dependencies (get_current_principal, require_admin)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import TokenCodec, get_token_codec
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    Principal,
    RegisterRequest,
    RegisterResponse,
    UserListItem,
    UsersListResponse,
)
from app.services.auth import (
    EmailTakenError,
    InvalidCredentialsError,
    UsernameTakenError,
    login,
    register_user,
)
from app.services.authentication import UnauthenticatedError, resolve_principal
from app.services.credential_store import CredentialStore

router = APIRouter()
security = HTTPBearer(auto_error=False)


def error_detail(code: str, message: str, reason: str | None = None) -> dict[str, Any]:
    """Uniform error body: {"code", "message"} plus "reason" when there is one."""
    detail: dict[str, Any] = {"code": code, "message": message}
    if reason is not None:
        detail["reason"] = reason
    return detail


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


# Password hashing is CPU-bound: these handlers are sync so FastAPI runs them
# on its thread pool instead of the event loop.
@router.post("/register", response_model=RegisterResponse)
def register(
    body: RegisterRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> RegisterResponse:
    """Create an account with role 'user'. Does not log the user in."""
    try:
        register_user(store, body.username, body.email, body.password)
    except UsernameTakenError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("UsernameTaken", e.message),
        ) from e
    except EmailTakenError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_detail("EmailTaken", e.message),
        ) from e
    return RegisterResponse()


@router.post("/login", response_model=LoginResponse)
def post_login(
    body: LoginRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        result = login(store, codec, body.username, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("InvalidCredentials", e.message),
        ) from e
    return LoginResponse(
        token=result.token,
        username=result.user.username,
        email=result.user.email,
        role=result.claims.role,
        expires_at=result.claims.expires_at,
    )


def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> Principal:
    """Dependency: require a valid Bearer JWT and return the principal. Raises 401 if missing or invalid."""
    token = credentials.credentials if credentials is not None else None
    try:
        return resolve_principal(token, codec, store)
    except UnauthenticatedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_detail("Unauthenticated", e.message, e.reason),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Dependency: require an authenticated admin. Raises 403 for non-admin."""
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("Forbidden", "Admin access required"),
        )
    return principal


@router.get("/me", response_model=Principal)
def get_me(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
    """Return the identity the presented token resolves to."""
    return principal


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[Principal, Depends(require_admin)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(
        users=[UserListItem.model_validate(u) for u in store.list_users()]
    )
