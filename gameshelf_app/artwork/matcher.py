"""
Title relevance ranking for catalog search hits.

Catalog search endpoints rank by their own notion of relevance (sales,
popularity, page views), which often puts a soundtrack, a sequel or a
franchise page above the game that was asked for. Hits are re-ordered by
fuzzy similarity to the search term before the result limit is applied.
"""

import re
from typing import Callable, List, Sequence, TypeVar

from rapidfuzz import fuzz

T = TypeVar("T")

_NON_WORD = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    if not title:
        return ""
    title = _NON_WORD.sub(" ", title.lower())
    return _SPACES.sub(" ", title).strip()


def title_similarity(term: str, title: str) -> float:
    """Similarity score 0-100 between a search term and a catalog title."""
    a = normalize_title(term)
    b = normalize_title(title)
    if not a or not b:
        return 0.0
    if a == b:
        return 100.0
    return float(fuzz.token_sort_ratio(a, b))


def rank_by_title(term: str, items: Sequence[T], key: Callable[[T], str]) -> List[T]:
    """
    Order items by descending similarity of key(item) to term.

    The sort is stable, so equally similar hits keep the catalog's order.
    """
    return sorted(items, key=lambda item: -title_similarity(term, key(item) or ""))
