"""Pydantic schemas for personal access token endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TokenCreate(BaseModel):
    """Schema for creating a personal access token."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="User-provided name for the token, e.g., 'SiteBar'",
    )
    expires_in_days: int | None = Field(
        default=None,
        ge=1,
        le=365,
        description="Optional expiration in days (1-365). None means no expiration.",
    )


class TokenCreateResponse(BaseModel):
    """
    Response when creating a token.

    The `token` field holds the plaintext and is only returned here. It cannot
    be retrieved again.
    """

    id: int
    name: str
    token: str
    token_prefix: str
    expires_at: datetime | None
    created_at: datetime


class TokenResponse(BaseModel):
    """Token metadata for list responses. Never includes the plaintext."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    token_prefix: str
    last_used_at: datetime | None
    expires_at: datetime | None
    created_at: datetime
