"""SQLAlchemy models."""
from models.api_token import ApiToken
from models.base import Base, TimestampMixin
from models.bookmark import Bookmark
from models.collection import Collection, CollectionBookmark, CollectionMember
from models.user import User

__all__ = [
    "ApiToken",
    "Base",
    "Bookmark",
    "Collection",
    "CollectionBookmark",
    "CollectionMember",
    "TimestampMixin",
    "User",
]
