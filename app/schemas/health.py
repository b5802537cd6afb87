"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether the users/posts database answered a trivial query",
    )
    signing_key: Literal["configured", "ephemeral"] = Field(
        description="'ephemeral' when JWT_SECRET is unset and tokens will not survive a restart",
    )
