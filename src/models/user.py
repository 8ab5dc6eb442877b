"""User model for storing authenticated users."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.api_token import ApiToken
    from models.bookmark import Bookmark
    from models.collection import Collection


class User(Base, TimestampMixin):
    """User model - stores identity provider info for ownership and membership."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    auth0_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="Auth0 'sub' claim - unique identifier from Auth0",
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
        comment="Stored lowercased and trimmed for exact lookups",
    )

    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )
    owned_collections: Mapped[list["Collection"]] = relationship(
        back_populates="owner",
        passive_deletes=True,
    )
    api_tokens: Mapped[list["ApiToken"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )
