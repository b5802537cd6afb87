"""Pydantic request/response schemas."""

from app.schemas.auth import (
    Claims,
    LoginRequest,
    LoginResponse,
    Principal,
    RegisterRequest,
    RegisterResponse,
    UserListItem,
    UsersListResponse,
)
from app.schemas.health import HealthResponse
from app.schemas.post import PostRequest, PostResponse, PostsListResponse

__all__ = [
    "Claims",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "PostRequest",
    "PostResponse",
    "PostsListResponse",
    "Principal",
    "RegisterRequest",
    "RegisterResponse",
    "UserListItem",
    "UsersListResponse",
]
