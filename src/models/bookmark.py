"""Bookmark model for storing user bookmarks."""
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.config import TAG_COLUMN_LENGTH, TITLE_COLUMN_LENGTH
from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.user import User


class Bookmark(Base, TimestampMixin):
    """Bookmark model - stores URLs with metadata and tags, owned by one user."""

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Serves "list my bookmarks, newest first"
        Index("ix_bookmarks_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    title: Mapped[str] = mapped_column(String(TITLE_COLUMN_LENGTH), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default="",
    )
    # Ordered as entered; normalized (trimmed, deduplicated) before storage
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(TAG_COLUMN_LENGTH)),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true"),
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
