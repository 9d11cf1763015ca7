"""
================================================================================
GameShelf - Artwork Aggregator
================================================================================
Fan-out / fan-in over every artwork provider.

Flow per term:
  1. Query all providers in parallel (latency = slowest provider)
  2. Pass unchecked paths (box-art archive) through the ExistenceValidator
  3. Merge in static provider priority order, never arrival order
  4. Drop duplicate URLs, keeping the first (highest priority) occurrence

If the primary term yields nothing and the query carries a distinct
secondary term, the flow runs once more with that term. There is no
further retry.
================================================================================
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from .models import Candidate, CandidateSet, PlatformTag, SearchQuery
from .providers.base import BaseArtworkProvider
from .validator import ExistenceValidator

logger = logging.getLogger(__name__)


class ArtworkAggregator:
    """Merges candidates from a priority-ordered list of providers."""

    def __init__(
        self,
        providers: Sequence[BaseArtworkProvider],
        validator: ExistenceValidator,
    ):
        self.providers = list(providers)
        self.validator = validator

    async def run_provider(
        self,
        provider: BaseArtworkProvider,
        term: str,
        platform_hint: Optional[PlatformTag],
        limit: int
    ) -> List[Candidate]:
        candidates = await provider.search(term, platform_hint, limit)

        if getattr(provider, 'requires_validation', False) and candidates:
            live = set(await self.validator.validate([c.url for c in candidates]))
            candidates = [c for c in candidates if c.url in live][:limit]

        return candidates

    async def collect(
        self,
        term: str,
        platform_hint: Optional[PlatformTag] = None,
        limit: int = 1
    ) -> CandidateSet:
        """Run every provider for one term and merge in priority order."""
        start_time = time.time()

        tasks = [
            self.run_provider(provider, term, platform_hint, limit)
            for provider in self.providers
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        groups: List[List[Candidate]] = []
        for provider, result in zip(self.providers, results):
            if isinstance(result, BaseException):
                # Providers are not supposed to raise; isolate them anyway
                logger.error(f"{provider!r} raised during search for '{term}': {result}")
                groups.append([])
                continue
            groups.append(result or [])

        merged = CandidateSet.merge(*groups)

        duration_ms = int((time.time() - start_time) * 1000)
        summary = ", ".join(
            f"{provider.id.value}={len(group)}"
            for provider, group in zip(self.providers, groups)
        )
        logger.info(f"Artwork search '{term}': {len(merged)} candidates in {duration_ms}ms ({summary})")
        return merged

    async def resolve(self, query: SearchQuery) -> CandidateSet:
        """Collect for the primary term, falling back once to the secondary."""
        limit = query.result_limit

        candidates = await self.collect(query.primary_term, query.platform_hint, limit)
        if candidates:
            return candidates

        fallback = query.fallback_term
        if not fallback:
            return candidates

        logger.info(f"No artwork for '{query.primary_term}', retrying with '{fallback}'")
        return await self.collect(fallback, query.platform_hint, limit)
