"""
================================================================================
GameShelf - Box-Art Archive Provider (libretro thumbnails)
================================================================================
The libretro thumbnail server is a plain static file tree:

    https://thumbnails.libretro.com/<System>/Named_Boxarts/<Game Name>.png

There is no search endpoint, so this provider guesses filenames from the
No-Intro naming convention (title + region suffix) and crosses them with
every system folder mapped from the platform hint. The resulting URLs are
unchecked guesses; most of them 404. They must go through the
ExistenceValidator before anyone trusts them.

Filename rules (from the libretro-thumbnails README):
  - the characters &*/:`<>?\\| are replaced with '_'
  - extension is always .png
================================================================================
"""

from typing import Dict, List, Optional, Tuple
from urllib.parse import quote
import logging

from .base import BaseArtworkProvider
from ..models import Candidate, PlatformTag, ProviderId

logger = logging.getLogger(__name__)

FORBIDDEN_CHARS = '&*/:`<>?\\|'

REGION_SUFFIXES = (
    "(World)",
    "(USA)",
    "(Europe)",
    "(USA, Europe)",
    "(Europe) (En,Fr,De,Es,It)",
)

# Current-generation hints also probe the previous generation's folder:
# plenty of titles ship on both and the archive lags behind new hardware.
SYSTEM_FOLDERS: Dict[PlatformTag, Tuple[str, ...]] = {
    PlatformTag.PS5: ("Sony - PlayStation 5", "Sony - PlayStation 4"),
    PlatformTag.SWITCH: ("Nintendo - Nintendo Switch", "Nintendo - Wii U"),
    PlatformTag.XBOX: ("Microsoft - Xbox One", "Microsoft - Xbox 360"),
    PlatformTag.STEAM: (),
    PlatformTag.PS1: ("Sony - PlayStation",),
    PlatformTag.PS2: ("Sony - PlayStation 2",),
    PlatformTag.PS3: ("Sony - PlayStation 3",),
    PlatformTag.PSP: ("Sony - PlayStation Portable",),
    PlatformTag.VITA: ("Sony - PlayStation Vita",),
    PlatformTag.XBOX_360: ("Microsoft - Xbox 360", "Microsoft - Xbox"),
    PlatformTag.NES: ("Nintendo - Nintendo Entertainment System",),
    PlatformTag.SNES: ("Nintendo - Super Nintendo Entertainment System",),
    PlatformTag.N64: ("Nintendo - Nintendo 64",),
    PlatformTag.GAMECUBE: ("Nintendo - GameCube",),
    PlatformTag.WII: ("Nintendo - Wii", "Nintendo - GameCube"),
    PlatformTag.WII_U: ("Nintendo - Wii U", "Nintendo - Wii"),
    PlatformTag.GAME_BOY: ("Nintendo - Game Boy",),
    PlatformTag.GBC: ("Nintendo - Game Boy Color", "Nintendo - Game Boy"),
    PlatformTag.GBA: ("Nintendo - Game Boy Advance",),
    PlatformTag.NDS: ("Nintendo - Nintendo DS",),
    PlatformTag.N3DS: ("Nintendo - Nintendo 3DS", "Nintendo - Nintendo DS"),
    PlatformTag.GENESIS: ("Sega - Mega Drive - Genesis",),
    PlatformTag.DREAMCAST: ("Sega - Dreamcast",),
}


def sanitize_filename(name: str) -> str:
    """Replace characters the archive forbids in filenames with '_'."""
    return "".join("_" if ch in FORBIDDEN_CHARS else ch for ch in name.strip())


def candidate_names(term: str) -> List[str]:
    """
    Filenames (without extension) to try for a term, most likely first.

    Sanitized term with each region suffix, then the raw term as a last
    resort for archives that kept an unsanitized name.
    """
    raw = term.strip()
    base = sanitize_filename(raw)

    names = [f"{base} {suffix}" for suffix in REGION_SUFFIXES]
    names.append(raw)

    seen = set()
    out = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        out.append(name)
    return out


def system_folders(platform_hint: Optional[PlatformTag]) -> Tuple[str, ...]:
    if platform_hint is None:
        return ()
    return SYSTEM_FOLDERS.get(platform_hint, ())


class BoxArtArchiveProvider(BaseArtworkProvider):
    """
    libretro thumbnail archive.

    Returns the whole guessed URL space; the aggregator validates it and
    applies the result limit afterwards.
    """

    id = ProviderId.BOX_ART_ARCHIVE
    name = "Box-Art Archive (libretro)"
    base_url = "https://thumbnails.libretro.com"
    image_dir = "Named_Boxarts"
    rate_limit = 0  # Builds URLs only; probes are bounded by the validator

    requires_platform = True
    requires_validation = True

    def __init__(self, client=None, timeout=None, base_url: Optional[str] = None):
        super().__init__(client=client, timeout=timeout)
        if base_url:
            self.base_url = base_url.rstrip("/")

    def build_urls(self, term: str, platform_hint: Optional[PlatformTag]) -> List[str]:
        """Cross every candidate filename with every mapped system folder."""
        folders = system_folders(platform_hint)
        if not folders:
            return []

        names = candidate_names(term)
        urls = []
        for folder in folders:
            folder_path = f"{self.base_url}/{quote(folder, safe='')}/{self.image_dir}"
            for name in names:
                urls.append(f"{folder_path}/{quote(name + '.png', safe='')}")
        return urls

    async def _search(
        self,
        term: str,
        platform_hint: Optional[PlatformTag],
        limit: int
    ) -> List[Candidate]:
        urls = self.build_urls(term, platform_hint)
        if not urls:
            logger.debug(f"{self.id.value}: no archive folders for {platform_hint}")
        return [self._candidate(url) for url in urls]
