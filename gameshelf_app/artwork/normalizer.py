"""Search-term derivation for raw game titles."""

import re
from typing import Optional

from .models import PlatformTag, SearchQuery

# Game lists are often written "本地标题 (English Title)"; full-width
# parentheses show up when the title was typed with a CJK input method.
_PAREN_SEGMENT = re.compile(r"[(（]([^()（）]+)[)）]")


def extract_parenthesized(title: str) -> Optional[str]:
    """Return the first non-blank parenthesized segment of a title."""
    for match in _PAREN_SEGMENT.finditer(title):
        inner = match.group(1).strip()
        if inner:
            return inner
    return None


def normalize(
    raw_title: Optional[str],
    platform_hint: Optional[PlatformTag] = None,
    randomize: bool = False,
    random_pool_size: int = 3,
) -> Optional[SearchQuery]:
    """
    Build a SearchQuery from a raw title.

    The parenthesized segment, when present, becomes the primary term
    (catalogs are English-biased) and the whole title the fallback.
    Blank titles yield None so callers can bail out before any request.
    """
    if raw_title is None:
        return None

    title = str(raw_title).strip()
    if not title:
        return None

    english = extract_parenthesized(title)
    if english:
        return SearchQuery(
            primary_term=english,
            secondary_term=title,
            platform_hint=platform_hint,
            randomize=randomize,
            random_pool_size=random_pool_size,
        )

    return SearchQuery(
        primary_term=title,
        secondary_term=None,
        platform_hint=platform_hint,
        randomize=randomize,
        random_pool_size=random_pool_size,
    )
