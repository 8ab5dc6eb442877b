"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import (
    normalize_tags,
    split_tags,
    validate_description_length,
    validate_title_length,
)


class BookmarkCreate(BaseModel):
    """
    Schema for creating a new bookmark.

    Title and URL are optional at the schema level so that a missing value is
    reported by the service with the same message for every caller (JSON API
    and SiteBar form alike).
    """

    title: str | None = None
    url: str | None = None
    description: str | None = ""
    tags: list[str] = Field(
        default=[],
        description="List of tags or a single comma-separated string. "
                    "Trimmed and deduplicated, keeping first-seen order.",
    )
    is_public: bool = True

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tag_input(cls, v: str | list[str] | None) -> list[str]:
        """Normalize tags from a list or a comma-separated string."""
        return normalize_tags(v)

    @field_validator("is_public", mode="before")
    @classmethod
    def default_is_public(cls, v: bool | None) -> bool:
        """Treat an explicit null as 'not specified' (public)."""
        if v is None:
            return True
        return v

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str | None) -> str | None:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)


class BookmarkResponse(BaseModel):
    """
    Schema for bookmark responses.

    Tags are always serialized as a list of trimmed, non-empty strings, whatever
    form they were stored in.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    description: str
    tags: list[str]
    is_public: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def split_stored_tags(cls, v: str | list[str] | None) -> list[str]:
        """Split stored tags into a clean list."""
        return split_tags(v)

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, v: str | None) -> str:
        """Render a missing description as an empty string."""
        return v or ""


class DeleteBookmarkResponse(BaseModel):
    """Acknowledgement returned by DELETE /bookmarks."""

    ok: bool = True
