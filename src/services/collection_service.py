"""
Service layer for collections, memberships and collection-bookmark associations.

Access rules:
- A collection is visible to its owner and its members. For everyone else it
  does not exist (CollectionNotFoundError), so existence is never revealed.
- Metadata changes, deletion and membership changes are owner-only
  (CollectionOwnerRequiredError once visibility is established).
- Any member may associate bookmarks they can see (owned or public) and remove
  associations.

Responses are composed explicitly from separate reads (collections, profiles,
counts, associations) instead of relying on ORM relationship loading.
"""
import logging

from sqlalchemy import ColumnElement, delete, exists, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.collection import Collection, CollectionBookmark, CollectionMember
from models.user import User
from schemas.bookmark import BookmarkResponse
from schemas.collection import (
    CollectionBookmarkResponse,
    CollectionCreate,
    CollectionDetailResponse,
    CollectionResponse,
    CollectionUpdate,
    MemberResponse,
)
from schemas.user import UserProfile
from services.bookmark_service import get_visible_bookmark
from services.exceptions import (
    BookmarkNotFoundError,
    CollectionNotFoundError,
    CollectionOwnerRequiredError,
    DuplicateCollectionBookmarkError,
    DuplicateMemberError,
    UserNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _access_filter(user_id: int) -> ColumnElement[bool]:
    """SQL condition matching collections the user owns or is a member of."""
    is_member = exists().where(
        CollectionMember.collection_id == Collection.id,
        CollectionMember.user_id == user_id,
    )
    return or_(Collection.owner_id == user_id, is_member)


def _require_owner(collection: Collection, user_id: int, action: str) -> None:
    """Raise CollectionOwnerRequiredError unless the user owns the collection."""
    if collection.owner_id != user_id:
        raise CollectionOwnerRequiredError(action)


def _clean_name(name: str | None) -> str:
    """Trim a collection name, rejecting empty results."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Collection name is required")
    return cleaned


async def get_accessible_collection(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
) -> Collection:
    """
    Get a collection the user owns or is a member of.

    Raises:
        CollectionNotFoundError: If the collection doesn't exist or the user has
            no access. The two cases are indistinguishable to the caller.
    """
    result = await db.execute(
        select(Collection).where(
            Collection.id == collection_id,
            _access_filter(user_id),
        ),
    )
    collection = result.scalar_one_or_none()
    if collection is None:
        raise CollectionNotFoundError(collection_id)
    return collection


# --- Read-side composition ---


async def _load_profiles(db: AsyncSession, user_ids: set[int]) -> dict[int, UserProfile]:
    """Load minimal profiles for a set of user IDs."""
    if not user_ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(user_ids)))
    return {user.id: UserProfile.model_validate(user) for user in result.scalars()}


async def _load_members(
    db: AsyncSession,
    collection_ids: list[int],
) -> dict[int, list[MemberResponse]]:
    """Load members (with profiles) for each collection, in join order."""
    members: dict[int, list[MemberResponse]] = {cid: [] for cid in collection_ids}
    if not collection_ids:
        return members
    result = await db.execute(
        select(CollectionMember, User)
        .join(User, User.id == CollectionMember.user_id)
        .where(CollectionMember.collection_id.in_(collection_ids))
        .order_by(CollectionMember.created_at.asc(), CollectionMember.user_id.asc()),
    )
    for membership, user in result.all():
        members[membership.collection_id].append(
            MemberResponse(
                user=UserProfile.model_validate(user),
                joined_at=membership.created_at,
            ),
        )
    return members


async def _count_bookmarks(db: AsyncSession, collection_ids: list[int]) -> dict[int, int]:
    """Count bookmark associations per collection."""
    if not collection_ids:
        return {}
    result = await db.execute(
        select(CollectionBookmark.collection_id, func.count().label("count"))
        .where(CollectionBookmark.collection_id.in_(collection_ids))
        .group_by(CollectionBookmark.collection_id),
    )
    return {row.collection_id: row.count for row in result}


async def _load_collection_bookmarks(
    db: AsyncSession,
    collection_id: int,
) -> list[CollectionBookmarkResponse]:
    """Load bookmarks associated with a collection, newest association first."""
    result = await db.execute(
        select(CollectionBookmark, Bookmark)
        .join(Bookmark, Bookmark.id == CollectionBookmark.bookmark_id)
        .where(CollectionBookmark.collection_id == collection_id)
        .order_by(CollectionBookmark.added_at.desc(), CollectionBookmark.bookmark_id.desc()),
    )
    return [
        CollectionBookmarkResponse(
            collection_id=link.collection_id,
            bookmark=BookmarkResponse.model_validate(bookmark),
            added_at=link.added_at,
        )
        for link, bookmark in result.all()
    ]


async def _compose_summaries(
    db: AsyncSession,
    collections: list[Collection],
) -> list[CollectionResponse]:
    """Assemble summary responses with owner, members and counts."""
    collection_ids = [c.id for c in collections]
    owners = await _load_profiles(db, {c.owner_id for c in collections})
    members = await _load_members(db, collection_ids)
    bookmark_counts = await _count_bookmarks(db, collection_ids)

    return [
        CollectionResponse(
            id=c.id,
            name=c.name,
            description=c.description,
            is_public=c.is_public,
            owner=owners[c.owner_id],
            members=members[c.id],
            bookmark_count=bookmark_counts.get(c.id, 0),
            member_count=len(members[c.id]),
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
        for c in collections
    ]


async def _compose_summary(db: AsyncSession, collection: Collection) -> CollectionResponse:
    """Assemble the summary response for a single collection."""
    summaries = await _compose_summaries(db, [collection])
    return summaries[0]


# --- Collection CRUD ---


async def list_accessible_collections(
    db: AsyncSession,
    user_id: int,
) -> list[CollectionResponse]:
    """List collections the user owns or is a member of, newest first."""
    result = await db.execute(
        select(Collection)
        .where(_access_filter(user_id))
        .order_by(Collection.created_at.desc(), Collection.id.desc()),
    )
    collections = list(result.scalars().all())
    return await _compose_summaries(db, collections)


async def create_collection(
    db: AsyncSession,
    user_id: int,
    data: CollectionCreate,
) -> CollectionResponse:
    """
    Create a collection owned by the user.

    Raises:
        ValidationError: If the name is empty after trimming.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    collection = Collection(
        owner_id=user_id,
        name=_clean_name(data.name),
        description=(data.description or "").strip(),
        is_public=data.is_public,
    )
    db.add(collection)
    await db.flush()
    await db.refresh(collection)
    return await _compose_summary(db, collection)


async def get_collection(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
) -> CollectionDetailResponse:
    """
    Get full collection detail for an owner or member.

    Raises:
        CollectionNotFoundError: If the collection doesn't exist or is not
            visible to the user.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)
    summary = await _compose_summary(db, collection)
    bookmarks = await _load_collection_bookmarks(db, collection.id)
    return CollectionDetailResponse(**summary.model_dump(), bookmarks=bookmarks)


async def update_collection(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
    data: CollectionUpdate,
) -> CollectionResponse:
    """
    Update collection metadata. Only fields present in the request are changed.

    Raises:
        CollectionNotFoundError: If the collection is not visible to the user.
        CollectionOwnerRequiredError: If the user is a member but not the owner.
        ValidationError: If the new name is empty after trimming, or is_public
            is explicitly null.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)
    _require_owner(collection, user_id, "edit")

    update_data = data.model_dump(exclude_unset=True)

    if "name" in update_data:
        collection.name = _clean_name(update_data["name"])
    if "description" in update_data:
        collection.description = (update_data["description"] or "").strip()
    if "is_public" in update_data:
        if update_data["is_public"] is None:
            raise ValidationError("is_public cannot be null")
        collection.is_public = update_data["is_public"]

    await db.flush()
    await db.refresh(collection)
    return await _compose_summary(db, collection)


async def delete_collection(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
) -> None:
    """
    Delete a collection owned by the user.

    Member and bookmark association rows are removed by the database
    (ON DELETE CASCADE). Bookmarks and user accounts are left untouched.

    Raises:
        CollectionNotFoundError: If the collection is not visible to the user.
        CollectionOwnerRequiredError: If the user is a member but not the owner.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)
    _require_owner(collection, user_id, "delete")

    await db.delete(collection)
    await db.flush()
    logger.info("Collection %s deleted by owner %s", collection_id, user_id)


# --- Membership ---

# Primary key constraint names; a unique violation on these means a concurrent
# request inserted the same pair first
_MEMBER_PK = "collection_members_pkey"
_COLLECTION_BOOKMARK_PK = "collection_bookmarks_pkey"


async def _is_member(db: AsyncSession, collection_id: int, user_id: int) -> bool:
    result = await db.execute(
        select(CollectionMember).where(
            CollectionMember.collection_id == collection_id,
            CollectionMember.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none() is not None


async def _is_in_collection(db: AsyncSession, collection_id: int, bookmark_id: int) -> bool:
    result = await db.execute(
        select(CollectionBookmark).where(
            CollectionBookmark.collection_id == collection_id,
            CollectionBookmark.bookmark_id == bookmark_id,
        ),
    )
    return result.scalar_one_or_none() is not None


async def add_member(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
    member_user_id: int,
) -> MemberResponse:
    """
    Add a user as a member of a collection.

    Args:
        db: Database session.
        user_id: ID of the acting user (must be the owner).
        collection_id: ID of the collection.
        member_user_id: ID of the user to add.

    Returns:
        The new member with profile.

    Raises:
        CollectionNotFoundError: If the collection is not visible to the actor.
        CollectionOwnerRequiredError: If the actor is not the owner.
        UserNotFoundError: If the target user doesn't exist.
        DuplicateMemberError: If the target is already a member or is the owner.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)
    _require_owner(collection, user_id, "add members")

    result = await db.execute(select(User).where(User.id == member_user_id))
    member_user = result.scalar_one_or_none()
    if member_user is None:
        raise UserNotFoundError()

    if member_user_id == collection.owner_id:
        raise DuplicateMemberError(collection_id, member_user_id, is_owner=True)

    # Early check for a clear error; the primary key catches concurrent inserts
    if await _is_member(db, collection_id, member_user_id):
        raise DuplicateMemberError(collection_id, member_user_id)

    membership = CollectionMember(collection_id=collection_id, user_id=member_user_id)
    try:
        async with db.begin_nested():  # Savepoint: a race rolls back only this insert
            db.add(membership)
    except IntegrityError as e:
        if _MEMBER_PK in str(e):
            raise DuplicateMemberError(collection_id, member_user_id) from e
        raise

    await db.refresh(membership)
    return MemberResponse(
        user=UserProfile.model_validate(member_user),
        joined_at=membership.created_at,
    )


async def remove_member(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
    member_user_id: int,
) -> None:
    """
    Remove a member from a collection.

    Removing a user who is not a member is a no-op.

    Raises:
        CollectionNotFoundError: If the collection is not visible to the actor.
        CollectionOwnerRequiredError: If the actor is not the owner.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)
    _require_owner(collection, user_id, "remove members")

    await db.execute(
        delete(CollectionMember).where(
            CollectionMember.collection_id == collection_id,
            CollectionMember.user_id == member_user_id,
        ),
    )
    await db.flush()


# --- Bookmark associations ---


async def add_bookmark_to_collection(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
    bookmark_id: int,
) -> CollectionBookmarkResponse:
    """
    Associate a bookmark with a collection.

    Any member may add bookmarks, but only ones they can see (owned by them or
    public). Ownership of the bookmark never changes.

    Raises:
        CollectionNotFoundError: If the collection is not visible to the actor.
        BookmarkNotFoundError: If the bookmark doesn't exist or is private to
            another user.
        DuplicateCollectionBookmarkError: If the bookmark is already in the collection.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)

    bookmark = await get_visible_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)

    if await _is_in_collection(db, collection.id, bookmark_id):
        raise DuplicateCollectionBookmarkError(collection.id, bookmark_id)

    link = CollectionBookmark(collection_id=collection.id, bookmark_id=bookmark_id)
    try:
        async with db.begin_nested():  # Savepoint: a race rolls back only this insert
            db.add(link)
    except IntegrityError as e:
        if _COLLECTION_BOOKMARK_PK in str(e):
            raise DuplicateCollectionBookmarkError(collection.id, bookmark_id) from e
        raise

    await db.refresh(link)
    return CollectionBookmarkResponse(
        collection_id=collection.id,
        bookmark=BookmarkResponse.model_validate(bookmark),
        added_at=link.added_at,
    )


async def remove_bookmark_from_collection(
    db: AsyncSession,
    user_id: int,
    collection_id: int,
    bookmark_id: int,
) -> None:
    """
    Remove a bookmark association from a collection.

    Removing a bookmark that is not in the collection is a no-op.

    Raises:
        CollectionNotFoundError: If the collection is not visible to the actor.
    """
    collection = await get_accessible_collection(db, user_id, collection_id)

    await db.execute(
        delete(CollectionBookmark).where(
            CollectionBookmark.collection_id == collection.id,
            CollectionBookmark.bookmark_id == bookmark_id,
        ),
    )
    await db.flush()
