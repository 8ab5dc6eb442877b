"""Pydantic schemas for collection, membership and association endpoints."""
from datetime import datetime

from pydantic import BaseModel, field_validator

from schemas.bookmark import BookmarkResponse
from schemas.user import UserProfile
from schemas.validators import validate_collection_name_length, validate_description_length


class CollectionCreate(BaseModel):
    """
    Schema for creating a collection.

    An empty or missing name is rejected by the service after trimming.
    """

    name: str | None = None
    description: str | None = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def check_name_length(cls, v: str | None) -> str | None:
        """Validate name length."""
        return validate_collection_name_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)


class CollectionUpdate(BaseModel):
    """
    Schema for updating a collection.

    Only fields present in the request body are changed (exclude_unset).
    """

    name: str | None = None
    description: str | None = None
    is_public: bool | None = None

    @field_validator("name")
    @classmethod
    def check_name_length(cls, v: str | None) -> str | None:
        """Validate name length."""
        return validate_collection_name_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)


class MemberRequest(BaseModel):
    """Request body for adding or removing a collection member."""

    user_id: int


class CollectionBookmarkRequest(BaseModel):
    """Request body for adding or removing a bookmark association."""

    bookmark_id: int


class MemberResponse(BaseModel):
    """A collection member with profile and join time."""

    user: UserProfile
    joined_at: datetime


class CollectionBookmarkResponse(BaseModel):
    """A bookmark associated with a collection, with the association time."""

    collection_id: int
    bookmark: BookmarkResponse
    added_at: datetime


class CollectionResponse(BaseModel):
    """
    Collection summary used by list, create and update responses.

    Composed by the service from the collection row, owner and member profiles,
    and aggregate counts.
    """

    id: int
    name: str
    description: str
    is_public: bool
    owner: UserProfile
    members: list[MemberResponse]
    bookmark_count: int
    member_count: int
    created_at: datetime
    updated_at: datetime


class CollectionDetailResponse(CollectionResponse):
    """Full collection detail including associated bookmarks, newest association first."""

    bookmarks: list[CollectionBookmarkResponse]
