"""Unauthenticated read access to public bookmarks."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.bookmark import BookmarkResponse
from services import bookmark_service
from services.exceptions import BookmarkNotFoundError

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/bookmarks", response_model=BookmarkResponse)
async def get_public_bookmark(
    bookmark_id: int = Query(alias="id", description="ID of the public bookmark"),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a bookmark by ID if it is public. Private bookmarks return 404."""
    try:
        bookmark = await bookmark_service.get_public_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return BookmarkResponse.model_validate(bookmark)
