"""Collection, membership and collection-bookmark endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.collection import (
    CollectionBookmarkRequest,
    CollectionBookmarkResponse,
    CollectionCreate,
    CollectionDetailResponse,
    CollectionResponse,
    CollectionUpdate,
    MemberRequest,
    MemberResponse,
)
from services import collection_service
from services.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

router = APIRouter(prefix="/collections", tags=["collections"])

_STATUS_BY_ERROR: list[tuple[type[ServiceError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def _to_http_error(e: ServiceError) -> HTTPException:
    """Translate a service exception into the matching HTTP error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("", response_model=list[CollectionResponse])
async def list_collections(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[CollectionResponse]:
    """List collections the current user owns or is a member of, newest first."""
    return await collection_service.list_accessible_collections(db, current_user.id)


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_collection(
    data: CollectionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CollectionResponse:
    """Create a collection owned by the current user."""
    try:
        return await collection_service.create_collection(db, current_user.id, data)
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.get("/{collection_id}", response_model=CollectionDetailResponse)
async def get_collection(
    collection_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CollectionDetailResponse:
    """
    Get a collection with owner, members and bookmarks.

    Returns 404 if the collection doesn't exist or the current user is neither
    its owner nor a member.
    """
    try:
        return await collection_service.get_collection(db, current_user.id, collection_id)
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.put("/{collection_id}", response_model=CollectionResponse)
async def update_collection(
    collection_id: int,
    data: CollectionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CollectionResponse:
    """
    Update collection name, description or visibility (owner only).

    Fields omitted from the body are left unchanged.
    """
    try:
        return await collection_service.update_collection(
            db, current_user.id, collection_id, data,
        )
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_collection(
    collection_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a collection (owner only). Bookmarks and member accounts are kept."""
    try:
        await collection_service.delete_collection(db, current_user.id, collection_id)
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.post(
    "/{collection_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    collection_id: int,
    data: MemberRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> MemberResponse:
    """
    Add a user to the collection (owner only).

    Returns 404 if the user doesn't exist, 409 if already a member.
    """
    try:
        return await collection_service.add_member(
            db, current_user.id, collection_id, data.user_id,
        )
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.delete("/{collection_id}/members", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    collection_id: int,
    data: MemberRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Remove a member from the collection (owner only). Removing a non-member succeeds."""
    try:
        await collection_service.remove_member(
            db, current_user.id, collection_id, data.user_id,
        )
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.post(
    "/{collection_id}/bookmarks",
    response_model=CollectionBookmarkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_bookmark(
    collection_id: int,
    data: CollectionBookmarkRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CollectionBookmarkResponse:
    """
    Add a bookmark to the collection (owner or member).

    The bookmark must be owned by the current user or public.
    """
    try:
        return await collection_service.add_bookmark_to_collection(
            db, current_user.id, collection_id, data.bookmark_id,
        )
    except ServiceError as e:
        raise _to_http_error(e) from e


@router.delete("/{collection_id}/bookmarks", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bookmark(
    collection_id: int,
    data: CollectionBookmarkRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Remove a bookmark from the collection. Removing an absent bookmark succeeds."""
    try:
        await collection_service.remove_bookmark_from_collection(
            db, current_user.id, collection_id, data.bookmark_id,
        )
    except ServiceError as e:
        raise _to_http_error(e) from e
