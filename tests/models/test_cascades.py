"""Tests for database-level cascade behavior of the data model."""
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.api_token import ApiToken
from models.bookmark import Bookmark
from models.collection import Collection, CollectionBookmark, CollectionMember
from models.user import User


async def _count(db_session: AsyncSession, model: type) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def test__deleting_user__removes_their_bookmarks_collections_and_memberships(
    db_session: AsyncSession,
    owner: User,
    member: User,
    make_bookmark,
) -> None:
    owners_collection = Collection(owner_id=owner.id, name="Owner's")
    db_session.add(owners_collection)
    await db_session.flush()
    member_bookmark = await make_bookmark(member)
    db_session.add_all([
        CollectionMember(collection_id=owners_collection.id, user_id=member.id),
        CollectionBookmark(collection_id=owners_collection.id, bookmark_id=member_bookmark.id),
    ])
    await db_session.flush()

    await db_session.execute(delete(User).where(User.id == member.id))

    assert await _count(db_session, Bookmark) == 0
    assert await _count(db_session, CollectionMember) == 0
    assert await _count(db_session, CollectionBookmark) == 0
    assert await _count(db_session, Collection) == 1


async def test__collection_defaults(db_session: AsyncSession, owner: User) -> None:
    collection = Collection(owner_id=owner.id, name="Defaults")
    db_session.add(collection)
    await db_session.flush()
    await db_session.refresh(collection)

    assert collection.description == ""
    assert collection.is_public is False
    assert collection.created_at is not None


async def test__deleting_user__removes_their_api_tokens(
    db_session: AsyncSession,
    owner: User,
    member: User,
) -> None:
    db_session.add_all([
        ApiToken(user_id=owner.id, name="Keep", token_hash="a" * 64, token_prefix="bm_keep"),
        ApiToken(user_id=member.id, name="Drop", token_hash="b" * 64, token_prefix="bm_drop"),
    ])
    await db_session.flush()

    await db_session.execute(delete(User).where(User.id == member.id))

    result = await db_session.execute(select(ApiToken.name))
    assert result.scalars().all() == ["Keep"]
