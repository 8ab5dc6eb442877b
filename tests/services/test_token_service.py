"""Tests for the personal access token service."""
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.api_token import ApiToken
from models.user import User
from schemas.token import TokenCreate
from services.token_service import (
    create_token,
    delete_token,
    generate_token,
    get_tokens,
    hash_token,
    is_personal_token,
    validate_token,
)


def test__generate_token__returns_prefixed_token_hash_and_prefix() -> None:
    plaintext, token_hash, prefix = generate_token()

    assert plaintext.startswith("bm_")
    assert prefix == plaintext[:12]
    assert token_hash == hash_token(plaintext)
    assert len(token_hash) == 64


def test__generate_token__produces_unique_tokens() -> None:
    tokens = [generate_token()[0] for _ in range(10)]
    assert len(set(tokens)) == 10


def test__is_personal_token__checks_prefix() -> None:
    assert is_personal_token("bm_abc")
    assert not is_personal_token("eyJhbGciOiJSUzI1NiJ9.payload.sig")


async def test__create_token__stores_hash_not_plaintext(
    db_session: AsyncSession,
    owner: User,
) -> None:
    api_token, plaintext = await create_token(db_session, owner.id, TokenCreate(name="SiteBar"))

    assert api_token.user_id == owner.id
    assert api_token.name == "SiteBar"
    assert api_token.token_hash == hash_token(plaintext)
    assert api_token.token_hash != plaintext
    assert api_token.expires_at is None


async def test__create_token__sets_expiry(db_session: AsyncSession, owner: User) -> None:
    api_token, _ = await create_token(
        db_session, owner.id, TokenCreate(name="Short", expires_in_days=30),
    )

    expected = datetime.now(UTC) + timedelta(days=30)
    assert api_token.expires_at is not None
    assert abs((api_token.expires_at - expected).total_seconds()) < 60


async def test__get_tokens__only_returns_own_tokens(
    db_session: AsyncSession,
    owner: User,
    member: User,
) -> None:
    await create_token(db_session, owner.id, TokenCreate(name="Mine"))
    await create_token(db_session, member.id, TokenCreate(name="Theirs"))

    tokens = await get_tokens(db_session, owner.id)

    assert [t.name for t in tokens] == ["Mine"]


async def test__delete_token__removes_own_token(db_session: AsyncSession, owner: User) -> None:
    api_token, _ = await create_token(db_session, owner.id, TokenCreate(name="Gone"))

    assert await delete_token(db_session, owner.id, api_token.id) is True

    result = await db_session.execute(select(ApiToken).where(ApiToken.id == api_token.id))
    assert result.scalar_one_or_none() is None


async def test__delete_token__other_users_token_returns_false(
    db_session: AsyncSession,
    owner: User,
    member: User,
) -> None:
    api_token, _ = await create_token(db_session, owner.id, TokenCreate(name="Kept"))

    assert await delete_token(db_session, member.id, api_token.id) is False
    assert await get_tokens(db_session, owner.id) == [api_token]


async def test__validate_token__valid_token_updates_last_used_at(
    db_session: AsyncSession,
    owner: User,
) -> None:
    api_token, plaintext = await create_token(db_session, owner.id, TokenCreate(name="Valid"))
    assert api_token.last_used_at is None

    validated = await validate_token(db_session, plaintext)

    assert validated is not None
    assert validated.id == api_token.id
    assert validated.last_used_at is not None


async def test__validate_token__unknown_token_returns_none(db_session: AsyncSession) -> None:
    assert await validate_token(db_session, "bm_not_a_real_token") is None


async def test__validate_token__expired_token_returns_none(
    db_session: AsyncSession,
    owner: User,
) -> None:
    api_token, plaintext = await create_token(db_session, owner.id, TokenCreate(name="Old"))
    api_token.expires_at = datetime.now(UTC) - timedelta(days=1)
    await db_session.flush()

    assert await validate_token(db_session, plaintext) is None
