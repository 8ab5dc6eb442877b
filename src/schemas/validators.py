"""
Shared validation and normalization functions for Pydantic schemas.

Used by bookmark and collection schemas and by the SiteBar form handler, so every
entry point applies the same tag and length rules.
"""
from core.config import get_settings

TAG_DELIMITER = ","


def split_tags(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """
    Split tag input into trimmed, non-empty strings.

    Accepts either a sequence of tags or a single comma-separated string.
    Order is preserved and duplicates are kept (see normalize_tags for dedup).
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(TAG_DELIMITER)
    elif isinstance(value, (list, tuple)):
        parts = [str(tag) for tag in value]
    else:
        raise ValueError("Tags must be a list of strings or a comma-separated string")
    return [part.strip() for part in parts if part.strip()]


def normalize_tags(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """
    Normalize tag input for storage.

    Args:
        value: A list of tags or a comma-separated string.

    Returns:
        Trimmed, non-empty tags with duplicates removed. The first occurrence
        wins, so display order matches input order. Matching is case-sensitive.

    Raises:
        ValueError: If the input has the wrong type or a tag is too long.
    """
    max_length = get_settings().max_tag_length
    normalized: list[str] = []
    seen: set[str] = set()
    for tag in split_tags(value):
        if len(tag) > max_length:
            raise ValueError(
                f"Tag exceeds maximum length of {max_length:,} characters: '{tag[:20]}...'",
            )
        if tag in seen:
            continue
        seen.add(tag)
        normalized.append(tag)
    return normalized


def validate_title_length(title: str | None) -> str | None:
    """Validate that title doesn't exceed maximum length."""
    settings = get_settings()
    if title is not None and len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description


def validate_collection_name_length(name: str | None) -> str | None:
    """Validate that a collection name doesn't exceed maximum length."""
    settings = get_settings()
    if name is not None and len(name.strip()) > settings.max_collection_name_length:
        raise ValueError(
            f"Collection name exceeds maximum length of "
            f"{settings.max_collection_name_length:,} characters.",
        )
    return name
