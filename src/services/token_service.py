"""Service layer for personal access tokens."""
import hashlib
import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.api_token import ApiToken
from schemas.token import TokenCreate

TOKEN_PREFIX = "bm_"


def generate_token() -> tuple[str, str, str]:
    """
    Generate a random personal access token.

    Returns:
        Tuple of (plaintext_token, token_hash, token_prefix).
    """
    plaintext = f"{TOKEN_PREFIX}{secrets.token_urlsafe(32)}"
    return plaintext, hash_token(plaintext), plaintext[:12]


def hash_token(token: str) -> str:
    """Hash a token for comparison against stored hashes."""
    return hashlib.sha256(token.encode()).hexdigest()


def is_personal_token(token: str) -> bool:
    return token.startswith(TOKEN_PREFIX)


async def create_token(
    db: AsyncSession,
    user_id: int,
    data: TokenCreate,
) -> tuple[ApiToken, str]:
    """
    Create a token for a user.

    Returns:
        Tuple of (ApiToken, plaintext_token). The plaintext is only available here.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    plaintext, token_hash, token_prefix = generate_token()

    expires_at = None
    if data.expires_in_days is not None:
        expires_at = datetime.now(UTC) + timedelta(days=data.expires_in_days)

    api_token = ApiToken(
        user_id=user_id,
        name=data.name,
        token_hash=token_hash,
        token_prefix=token_prefix,
        expires_at=expires_at,
    )
    db.add(api_token)
    await db.flush()
    await db.refresh(api_token)
    return api_token, plaintext


async def get_tokens(db: AsyncSession, user_id: int) -> list[ApiToken]:
    """List a user's tokens, newest first."""
    result = await db.execute(
        select(ApiToken)
        .where(ApiToken.user_id == user_id)
        .order_by(ApiToken.created_at.desc(), ApiToken.id.desc()),
    )
    return list(result.scalars().all())


async def delete_token(db: AsyncSession, user_id: int, token_id: int) -> bool:
    """
    Revoke a token owned by the user.

    Returns:
        True if deleted, False if not found or owned by someone else.
    """
    result = await db.execute(
        select(ApiToken).where(
            ApiToken.id == token_id,
            ApiToken.user_id == user_id,
        ),
    )
    api_token = result.scalar_one_or_none()
    if api_token is None:
        return False

    await db.delete(api_token)
    await db.flush()
    return True


async def validate_token(db: AsyncSession, plaintext_token: str) -> ApiToken | None:
    """
    Return the ApiToken for a plaintext token if it exists and has not expired.

    The lookup is by hash, so the plaintext never reaches the database.
    Updates last_used_at on success (flush, not commit).
    """
    result = await db.execute(
        select(ApiToken).where(ApiToken.token_hash == hash_token(plaintext_token)),
    )
    api_token = result.scalar_one_or_none()
    if api_token is None:
        return None

    if api_token.expires_at is not None and datetime.now(UTC) > api_token.expires_at:
        return None

    api_token.last_used_at = datetime.now(UTC)
    await db.flush()
    return api_token
