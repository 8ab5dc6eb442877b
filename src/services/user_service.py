"""Service layer for user lookup and provisioning."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.user import UserProfile
from services.exceptions import UserNotFoundError, ValidationError


def normalize_email(email: str | None) -> str | None:
    """Lowercase and trim an email address. Blank input becomes None."""
    if email is None:
        return None
    normalized = email.strip().lower()
    return normalized or None


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by exact match on the normalized email address."""
    normalized = normalize_email(email)
    if normalized is None:
        return None
    result = await db.execute(select(User).where(User.email == normalized))
    return result.scalar_one_or_none()


async def resolve_user_by_email(db: AsyncSession, email: str) -> UserProfile:
    """
    Resolve an email address to a minimal user profile.

    Used by clients to turn an email into a user id before inviting that user
    to a collection.

    Raises:
        ValidationError: If the email is empty.
        UserNotFoundError: If no user has that email.
    """
    if normalize_email(email) is None:
        raise ValidationError("Email is required")

    user = await get_user_by_email(db, email)
    if user is None:
        raise UserNotFoundError()
    return UserProfile.model_validate(user)


async def create_user(
    db: AsyncSession,
    auth0_id: str,
    email: str | None = None,
    name: str | None = None,
) -> User:
    """
    Create a user from identity provider claims.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    user = User(auth0_id=auth0_id, email=normalize_email(email), name=name)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user
