"""Request/response schemas for post endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PostRequest(BaseModel):
    """Title and content for creating or replacing a post."""

    title: str = Field(..., min_length=1, max_length=200, description="Post title")
    content: str = Field(..., min_length=1, description="Post body")

    @field_validator("title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class PostResponse(BaseModel):
    """A post as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    author_id: int
    created_at: datetime
    updated_at: datetime


class PostsListResponse(BaseModel):
    """Response for post listings."""

    posts: list[PostResponse]
