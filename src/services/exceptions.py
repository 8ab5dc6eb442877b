"""
Shared exceptions for service layer operations.

Services raise these; the API layer translates each category into an HTTP status
(ValidationError -> 400, ForbiddenError -> 403, NotFoundError -> 404,
ConflictError -> 409).
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when a required field is missing or empty after normalization."""


class NotFoundError(ServiceError):
    """
    Raised when a resource is absent or hidden from the actor.

    Both cases produce the same error so that resource existence is not
    revealed to users who may not see it.
    """


class ForbiddenError(ServiceError):
    """Raised when an authorized viewer attempts an owner-only action."""


class ConflictError(ServiceError):
    """Raised when a unique (collection, user) or (collection, bookmark) pair already exists."""


class BookmarkNotFoundError(NotFoundError):
    """Raised when a bookmark does not exist or is not visible to the actor."""

    def __init__(self, bookmark_id: int) -> None:
        self.bookmark_id = bookmark_id
        super().__init__("Bookmark not found")


class CollectionNotFoundError(NotFoundError):
    """Raised when a collection does not exist or the actor is neither owner nor member."""

    def __init__(self, collection_id: int) -> None:
        self.collection_id = collection_id
        super().__init__("Collection not found")


class UserNotFoundError(NotFoundError):
    """Raised when a target user cannot be found."""

    def __init__(self) -> None:
        super().__init__("User not found")


class CollectionOwnerRequiredError(ForbiddenError):
    """Raised when a member who is not the owner attempts an owner-only action."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Only collection owner can {action}")


class DuplicateMemberError(ConflictError):
    """Raised when the user already belongs to the collection (as member or owner)."""

    def __init__(self, collection_id: int, user_id: int, *, is_owner: bool = False) -> None:
        self.collection_id = collection_id
        self.user_id = user_id
        if is_owner:
            super().__init__("User is the collection owner")
        else:
            super().__init__("User is already a member")


class DuplicateCollectionBookmarkError(ConflictError):
    """Raised when the bookmark is already in the collection."""

    def __init__(self, collection_id: int, bookmark_id: int) -> None:
        self.collection_id = collection_id
        self.bookmark_id = bookmark_id
        super().__init__("Bookmark is already in collection")
