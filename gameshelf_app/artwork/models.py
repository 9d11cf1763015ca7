"""
================================================================================
GameShelf - Artwork Models
================================================================================
Shared types for the artwork resolution pipeline.

A resolution call builds these fresh and throws them away once a URL has
been selected:
  - SearchQuery   - search terms + platform hint + randomize flag
  - Candidate     - one hypothesised image URL tagged with its provider
  - CandidateSet  - merged, priority-ordered, URL-deduplicated candidates
================================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class ProviderId(str, Enum):
    """Artwork catalogs, declared in merge priority order."""
    BOX_ART_ARCHIVE = "box_art_archive"
    DEAL_AGGREGATOR = "deal_aggregator"
    ENCYCLOPEDIA_THUMBNAIL = "encyclopedia_thumbnail"
    APP_STORE_ART = "app_store_art"


class PlatformTag(str, Enum):
    """Platform hints accepted by the pipeline."""
    # Platforms offered by the game list UI
    PS5 = "PS5"
    SWITCH = "Switch 1/2"
    XBOX = "Xbox"
    STEAM = "Steam"

    # Older systems covered by the box-art archive
    PS1 = "PS1"
    PS2 = "PS2"
    PS3 = "PS3"
    PSP = "PSP"
    VITA = "Vita"
    XBOX_360 = "Xbox 360"
    NES = "NES"
    SNES = "SNES"
    N64 = "N64"
    GAMECUBE = "GameCube"
    WII = "Wii"
    WII_U = "Wii U"
    GAME_BOY = "Game Boy"
    GBC = "Game Boy Color"
    GBA = "Game Boy Advance"
    NDS = "DS"
    N3DS = "3DS"
    GENESIS = "Genesis"
    DREAMCAST = "Dreamcast"

    @classmethod
    def parse(cls, value) -> Optional["PlatformTag"]:
        """
        Resolve a tag from an enum member, its value, its name or an alias.

        Returns None for empty or unknown input.
        """
        if value is None:
            return None
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        if not key:
            return None

        for tag in cls:
            if key == tag.value.lower() or key == tag.name.lower():
                return tag
        return _PLATFORM_ALIASES.get(key)


_PLATFORM_ALIASES = {
    "playstation 5": PlatformTag.PS5,
    "ps4": PlatformTag.PS5,
    "switch": PlatformTag.SWITCH,
    "switch 2": PlatformTag.SWITCH,
    "ns": PlatformTag.SWITCH,
    "xbox series": PlatformTag.XBOX,
    "xbox one": PlatformTag.XBOX,
    "pc": PlatformTag.STEAM,
    "psx": PlatformTag.PS1,
    "playstation": PlatformTag.PS1,
    "playstation 2": PlatformTag.PS2,
    "playstation 3": PlatformTag.PS3,
    "ps vita": PlatformTag.VITA,
    "famicom": PlatformTag.NES,
    "super famicom": PlatformTag.SNES,
    "gb": PlatformTag.GAME_BOY,
    "gbc": PlatformTag.GBC,
    "gba": PlatformTag.GBA,
    "nds": PlatformTag.NDS,
    "mega drive": PlatformTag.GENESIS,
}


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass(frozen=True)
class SearchQuery:
    """
    Search terms for one resolution call.

    primary_term is what every provider is asked first. secondary_term is
    the single fallback, used only when the primary pass finds nothing.
    """
    primary_term: str
    secondary_term: Optional[str] = None
    platform_hint: Optional[PlatformTag] = None
    randomize: bool = False
    random_pool_size: int = 3

    @property
    def result_limit(self) -> int:
        """Per-provider hit limit: the single best match unless re-rolling."""
        if not self.randomize:
            return 1
        return max(2, self.random_pool_size)

    @property
    def fallback_term(self) -> Optional[str]:
        """Secondary term, if it is usable as a distinct fallback."""
        if self.secondary_term and self.secondary_term != self.primary_term:
            return self.secondary_term
        return None


@dataclass(frozen=True)
class Candidate:
    """A URL hypothesised to be artwork for a title."""
    url: str
    provider: ProviderId


class CandidateSet:
    """
    Ordered, URL-deduplicated candidates.

    Build with merge(); order follows the order of the input groups, so
    callers pass groups in provider priority order.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Tuple[Candidate, ...] = ()):
        self._items = tuple(items)

    @classmethod
    def merge(cls, *groups: Iterable[Candidate]) -> "CandidateSet":
        """Concatenate groups, dropping non-http URLs and repeated URLs."""
        seen = set()
        merged: List[Candidate] = []
        for group in groups:
            for candidate in group:
                url = candidate.url
                if not isinstance(url, str) or not url.startswith("http"):
                    continue
                if url in seen:
                    continue
                seen.add(url)
                merged.append(candidate)
        return cls(tuple(merged))

    def urls(self) -> List[str]:
        return [candidate.url for candidate in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Candidate:
        return self._items[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, CandidateSet):
            return NotImplemented
        return self._items == other._items

    def __repr__(self):
        return f"<CandidateSet({len(self._items)} candidates)>"
