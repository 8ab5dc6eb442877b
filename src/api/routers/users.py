"""User endpoints: current profile and lookup by email."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.user import UserProfile, UserSearchRequest, UserSearchResponse
from services import user_service
from services.exceptions import UserNotFoundError, ValidationError

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserProfile)
async def get_me(current_user: User = Depends(get_current_user)) -> UserProfile:
    """Get the current authenticated user's profile."""
    return UserProfile.model_validate(current_user)


@router.post("/search", response_model=UserSearchResponse)
async def search_user(
    data: UserSearchRequest,
    _current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> UserSearchResponse:
    """
    Resolve a user by email address (case-insensitive, exact match).

    Used to look up the user id before adding someone to a collection.
    """
    try:
        profile = await user_service.resolve_user_by_email(db, data.email)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return UserSearchResponse(user=profile)
