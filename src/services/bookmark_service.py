"""Service layer for bookmark CRUD operations and bookmark visibility rules."""
import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate
from services.exceptions import BookmarkNotFoundError, ValidationError

logger = logging.getLogger(__name__)


async def list_owned_bookmarks(db: AsyncSession, user_id: int) -> list[Bookmark]:
    """
    List every bookmark owned by a user, newest first.

    Ties on created_at are broken by id so the order is deterministic.
    """
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc()),
    )
    return list(result.scalars().all())


async def create_bookmark(
    db: AsyncSession,
    user_id: int,
    data: BookmarkCreate,
) -> Bookmark:
    """
    Create a new bookmark owned by a user.

    Args:
        db: Database session.
        user_id: ID of the owner.
        data: Bookmark creation data. Tags are already normalized by the schema.

    Returns:
        The created bookmark.

    Raises:
        ValidationError: If title or url is missing or blank.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    title = (data.title or "").strip()
    url = (data.url or "").strip()
    if not title or not url:
        raise ValidationError("Title and URL are required")

    bookmark = Bookmark(
        user_id=user_id,
        title=title,
        url=url,
        description=(data.description or "").strip(),
        tags=list(data.tags),
        is_public=data.is_public,
    )
    db.add(bookmark)
    await db.flush()
    await db.refresh(bookmark)
    return bookmark


async def get_owned_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> Bookmark | None:
    """Get a bookmark by ID, scoped to its owner. Returns None if not found or not owned."""
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def get_visible_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> Bookmark | None:
    """Get a bookmark the user may read: owned by them or public."""
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            or_(Bookmark.user_id == user_id, Bookmark.is_public.is_(True)),
        ),
    )
    return result.scalar_one_or_none()


async def delete_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
) -> None:
    """
    Permanently delete a bookmark owned by the user.

    Collection associations referencing the bookmark are removed by the
    database (ON DELETE CASCADE).

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist or belongs to
            another user. The two cases are indistinguishable to the caller.
    """
    bookmark = await get_owned_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)

    await db.delete(bookmark)
    await db.flush()
    logger.info("Deleted bookmark %s for user %s", bookmark_id, user_id)


async def get_public_bookmark(db: AsyncSession, bookmark_id: int) -> Bookmark:
    """
    Get a public bookmark by exact ID, without authentication.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist or is private.
    """
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.is_public.is_(True),
        ),
    )
    bookmark = result.scalar_one_or_none()
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    return bookmark
