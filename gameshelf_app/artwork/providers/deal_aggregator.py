"""
================================================================================
GameShelf - Deal Aggregator Provider (CheapShark)
================================================================================
CheapShark indexes Steam and other PC storefronts. Its game lookup returns
an already-hosted capsule thumbnail per match, so no existence check is
needed.

API Documentation: https://apidocs.cheapshark.com/
Endpoint: GET /api/1.0/games?title=<term>&limit=<n>
Response: [{"gameID": "...", "external": "Elden Ring", "thumb": "https://..."}]
================================================================================
"""

from typing import List, Optional
import logging

from .base import BaseArtworkProvider, ProviderResponseError
from ..matcher import rank_by_title
from ..models import Candidate, PlatformTag, ProviderId

logger = logging.getLogger(__name__)

# Hits requested before re-ranking by title similarity
FETCH_SIZE = 5


class DealAggregatorProvider(BaseArtworkProvider):
    """CheapShark title lookup."""

    id = ProviderId.DEAL_AGGREGATOR
    name = "CheapShark"
    base_url = "https://www.cheapshark.com/api/1.0"
    rate_limit = 60

    async def _search(
        self,
        term: str,
        platform_hint: Optional[PlatformTag],
        limit: int
    ) -> List[Candidate]:
        params = {
            'title': term,
            'limit': max(limit, FETCH_SIZE),
        }
        data = await self._request("GET", f"{self.base_url}/games", params=params)

        if not isinstance(data, list):
            raise ProviderResponseError(self.id.value, f"expected list, got {type(data).__name__}")

        games = [
            game for game in data
            if isinstance(game, dict) and isinstance(game.get('thumb'), str) and game['thumb']
        ]
        ranked = rank_by_title(term, games, key=lambda game: game.get('external') or '')

        return [self._candidate(game['thumb']) for game in ranked[:limit]]
