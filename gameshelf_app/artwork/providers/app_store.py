"""
================================================================================
GameShelf - App Store Artwork Provider (iTunes Search)
================================================================================
iTunes Search over software listings. Artwork URLs come back at a small
size with the resolution baked into the filename, e.g.

    https://is1-ssl.mzstatic.com/image/thumb/.../AppIcon/100x100bb.jpg

The CDN renders any requested size, so the token is rewritten to the
configured size before the URL becomes a candidate.

API Documentation: https://performance-partners.apple.com/search-api
================================================================================
"""

from typing import List, Optional
import re
import logging

from .base import BaseArtworkProvider, ProviderResponseError
from ..matcher import rank_by_title
from ..models import Candidate, PlatformTag, ProviderId

logger = logging.getLogger(__name__)

FETCH_SIZE = 5

# Largest first; the size token gets rewritten anyway
ARTWORK_FIELDS = ('artworkUrl512', 'artworkUrl100', 'artworkUrl60')

# "100x100bb.jpg" -> groups: "bb", ".jpg"
_RESOLUTION_TOKEN = re.compile(r"\d+x\d+([a-z]*)(\.\w+)$")


def upscale_artwork_url(url: str, size: int = 600) -> str:
    """Rewrite the NNNxNNN resolution token at the end of an artwork URL."""
    return _RESOLUTION_TOKEN.sub(
        lambda m: f"{size}x{size}{m.group(1)}{m.group(2)}",
        url,
        count=1,
    )


class AppStoreArtProvider(BaseArtworkProvider):
    """iTunes software search."""

    id = ProviderId.APP_STORE_ART
    name = "App Store"
    base_url = "https://itunes.apple.com/search"
    rate_limit = 20  # Apple documents ~20 calls/minute

    def __init__(self, client=None, timeout=None, image_size: int = 600):
        super().__init__(client=client, timeout=timeout)
        self.image_size = image_size

    async def _search(
        self,
        term: str,
        platform_hint: Optional[PlatformTag],
        limit: int
    ) -> List[Candidate]:
        params = {
            'term': term,
            'media': 'software',
            'entity': 'software',
            'limit': max(limit, FETCH_SIZE),
        }
        data = await self._request("GET", self.base_url, params=params)

        if not isinstance(data, dict) or not isinstance(data.get('results', []), list):
            raise ProviderResponseError(self.id.value, "missing 'results' list")

        hits = []
        for item in data.get('results', []):
            if not isinstance(item, dict):
                continue
            artwork = next(
                (item[field] for field in ARTWORK_FIELDS if isinstance(item.get(field), str) and item[field]),
                None
            )
            if artwork:
                hits.append((item.get('trackName') or '', artwork))

        ranked = rank_by_title(term, hits, key=lambda hit: hit[0])

        return [
            self._candidate(upscale_artwork_url(artwork, self.image_size))
            for _, artwork in ranked[:limit]
        ]
