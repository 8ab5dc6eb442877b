"""Collection models: shared groups of bookmarks with members."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.config import COLLECTION_NAME_COLUMN_LENGTH
from models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark
    from models.user import User


class Collection(Base, TimestampMixin):
    """
    Collection model - a named group of bookmarks shared with members.

    The owner is tracked by owner_id and never appears in collection_members.
    Deleting a collection cascades to its member and bookmark association rows
    at the database level; bookmarks and users are never deleted with it.
    """

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(COLLECTION_NAME_COLUMN_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default="",
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )

    owner: Mapped["User"] = relationship(back_populates="owned_collections")
    members: Mapped[list["CollectionMember"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    bookmark_links: Mapped[list["CollectionBookmark"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CollectionMember(Base):
    """
    Membership of a non-owner user in a collection.

    The composite primary key makes (collection_id, user_id) unique at the
    database level, so concurrent invites cannot produce duplicate rows.
    """

    __tablename__ = "collection_members"
    __table_args__ = (
        # Lookups by user ("collections I am a member of"); PK already covers collection_id
        Index("ix_collection_members_user_id", "user_id"),
    )

    collection_id: Mapped[int] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )

    collection: Mapped["Collection"] = relationship(back_populates="members")
    user: Mapped["User"] = relationship()


class CollectionBookmark(Base):
    """
    Association of a bookmark with a collection, stamped with when it was added.

    The composite primary key makes (collection_id, bookmark_id) unique at the
    database level. Deleting the bookmark removes the association as well.
    """

    __tablename__ = "collection_bookmarks"
    __table_args__ = (
        Index("ix_collection_bookmarks_bookmark_id", "bookmark_id"),
        # Serves "bookmarks in this collection, newest association first"
        Index("ix_collection_bookmarks_collection_id_added_at", "collection_id", "added_at"),
    )

    collection_id: Mapped[int] = mapped_column(
        ForeignKey("collections.id", ondelete="CASCADE"),
        primary_key=True,
    )
    bookmark_id: Mapped[int] = mapped_column(
        ForeignKey("bookmarks.id", ondelete="CASCADE"),
        primary_key=True,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.clock_timestamp(),
        nullable=False,
    )

    collection: Mapped["Collection"] = relationship(back_populates="bookmark_links")
    bookmark: Mapped["Bookmark"] = relationship()
