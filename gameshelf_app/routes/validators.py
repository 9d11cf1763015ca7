"""Lightweight request validation helpers."""

from typing import Any, Optional, Tuple

from ..artwork.models import PlatformTag


MAX_TITLE_LENGTH = 300
MAX_BATCH_ITEMS = 50

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def validate_title(title: Any) -> Optional[str]:
    """
    Validate a game title.

    Returns:
        None if valid, or error message string.
    """
    if title is None:
        return "Missing title"
    if not isinstance(title, str):
        return "Title must be a string"
    if not title.strip():
        return "Title is empty"
    if len(title) > MAX_TITLE_LENGTH:
        return f"Title exceeds max length {MAX_TITLE_LENGTH}"
    return None


def parse_platform(value: Any) -> Tuple[Optional[PlatformTag], Optional[str]]:
    """
    Parse an optional platform parameter.

    Returns:
        (tag or None, error message or None)
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, None
    if not isinstance(value, str):
        return None, "Platform must be a string"
    tag = PlatformTag.parse(value)
    if tag is None:
        return None, f"Unknown platform: {value}"
    return tag, None


def parse_bool(value: Any) -> bool:
    """Interpret query-string and JSON booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES
