"""Request/response schemas for auth endpoints, plus token claims and the request principal."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.user import Role


class RegisterRequest(BaseModel):
    """New account details. Registration always yields role 'user'."""

    username: str = Field(..., min_length=1, max_length=255, description="Username (case-sensitive)")
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$", description="Email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RegisterResponse(BaseModel):
    """Confirmation returned after registration. No token is issued."""

    message: str = "User registered successfully"


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class LoginResponse(BaseModel):
    """JWT access token and the account it was issued for."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    username: str
    email: str
    role: Role
    expires_at: datetime


class Claims(BaseModel):
    """Claims carried by (and recoverable from) an access token."""

    model_config = ConfigDict(frozen=True)

    subject: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class Principal(BaseModel):
    """Authenticated identity attached to a request after token verification."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserListItem]
