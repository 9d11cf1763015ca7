"""
================================================================================
GameShelf - Encyclopedia Thumbnail Provider (Wikipedia)
================================================================================
Full-text search over English Wikipedia, narrowed by appending "video game"
to the term, returning the lead image thumbnail of each matching page.

API: MediaWiki Action API (https://www.mediawiki.org/wiki/API:Main_page)
Query:
    action=query, generator=search, gsrsearch="<term> video game",
    prop=pageimages, piprop=thumbnail, pithumbsize=<px>

The generator returns pages keyed by page id, not in rank order; each page
carries an "index" field with its search rank. Pages without a lead image
have no "thumbnail" key.
================================================================================
"""

from typing import List, Optional
import logging

from .base import BaseArtworkProvider, ProviderResponseError
from ..matcher import rank_by_title
from ..models import Candidate, PlatformTag, ProviderId

logger = logging.getLogger(__name__)

FETCH_SIZE = 5
SEARCH_QUALIFIER = "video game"


class EncyclopediaThumbnailProvider(BaseArtworkProvider):
    """Wikipedia page thumbnails."""

    id = ProviderId.ENCYCLOPEDIA_THUMBNAIL
    name = "Wikipedia"
    base_url = "https://en.wikipedia.org/w/api.php"
    rate_limit = 120

    def __init__(self, client=None, timeout=None, thumb_size: int = 600):
        super().__init__(client=client, timeout=timeout)
        self.thumb_size = thumb_size

    async def _search(
        self,
        term: str,
        platform_hint: Optional[PlatformTag],
        limit: int
    ) -> List[Candidate]:
        params = {
            'action': 'query',
            'format': 'json',
            'generator': 'search',
            'gsrsearch': f"{term} {SEARCH_QUALIFIER}",
            'gsrlimit': max(limit, FETCH_SIZE),
            'gsrnamespace': 0,
            'prop': 'pageimages',
            'piprop': 'thumbnail',
            'pithumbsize': self.thumb_size,
        }
        data = await self._request("GET", self.base_url, params=params)

        if not isinstance(data, dict):
            raise ProviderResponseError(self.id.value, "expected JSON object")
        if 'error' in data:
            raise ProviderResponseError(self.id.value, f"API error: {data['error']}")

        # No "query" key simply means zero hits
        pages = (data.get('query') or {}).get('pages') or {}
        if isinstance(pages, dict):
            pages = list(pages.values())
        if not isinstance(pages, list):
            raise ProviderResponseError(self.id.value, "unexpected 'pages' shape")

        with_thumbs = []
        for page in pages:
            if not isinstance(page, dict):
                continue
            source = (page.get('thumbnail') or {}).get('source')
            if isinstance(source, str) and source:
                with_thumbs.append(page)

        with_thumbs.sort(key=lambda page: page.get('index', 0))
        ranked = rank_by_title(term, with_thumbs, key=lambda page: page.get('title') or '')

        return [self._candidate(page['thumbnail']['source']) for page in ranked[:limit]]
