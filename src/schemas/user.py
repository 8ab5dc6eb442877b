"""Pydantic schemas for user profiles and user lookup."""
from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    """Minimal public profile of a user, embedded in collection responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None
    email: str | None


class UserSearchRequest(BaseModel):
    """Request body for resolving a user by email address."""

    email: str


class UserSearchResponse(BaseModel):
    """Response wrapping the profile of the resolved user."""

    user: UserProfile
