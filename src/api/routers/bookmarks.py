"""Bookmark endpoints for the authenticated owner."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.bookmark import BookmarkCreate, BookmarkResponse, DeleteBookmarkResponse
from services import bookmark_service
from services.exceptions import BookmarkNotFoundError, ValidationError

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("", response_model=list[BookmarkResponse])
async def list_bookmarks(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """List all bookmarks owned by the current user, newest first."""
    bookmarks = await bookmark_service.list_owned_bookmarks(db, current_user.id)
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.post("", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Create a new bookmark.

    - **title**, **url**: required, must not be blank
    - **tags**: list or comma-separated string; trimmed and deduplicated
    - **is_public**: defaults to true
    """
    try:
        bookmark = await bookmark_service.create_bookmark(db, current_user.id, data)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return BookmarkResponse.model_validate(bookmark)


@router.delete("", response_model=DeleteBookmarkResponse)
async def delete_bookmark(
    bookmark_id: int = Query(alias="id", description="ID of the bookmark to delete"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> DeleteBookmarkResponse:
    """
    Delete a bookmark owned by the current user.

    Returns 404 both when the bookmark doesn't exist and when it belongs to
    another user.
    """
    try:
        await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    except BookmarkNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return DeleteBookmarkResponse(ok=True)
