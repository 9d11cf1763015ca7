"""
================================================================================
GameShelf - Artwork Resolver
================================================================================
Entry point of the artwork pipeline:

    title --normalize--> SearchQuery --aggregate--> CandidateSet --select--> URL

The only outcomes a caller ever sees are a URL or None. Every failure below
this boundary has already been turned into "fewer candidates".

Usage:
    async with ArtworkResolver() as resolver:
        url = await resolver.resolve_artwork("艾尔登法环 (Elden Ring)", "PS5")

    # One-shot helper, builds and closes its own resolver
    url = await resolve_artwork("Hades", randomize=True)
================================================================================
"""

import asyncio
import logging
import random
from typing import Dict, Optional, Sequence, Union

import httpx

from .aggregator import ArtworkAggregator
from .config import ArtworkSettings
from .models import CandidateSet, PlatformTag
from .normalizer import normalize
from .providers import build_default_providers
from .providers.base import BaseArtworkProvider
from .selector import select
from .validator import ExistenceValidator

logger = logging.getLogger(__name__)

PlatformHint = Union[PlatformTag, str, None]

HEALTH_CHECK_TERM = "Tetris"


class ArtworkResolver:
    """
    Resolves a free-text game title to a single artwork URL.

    Holds the providers and the validator; every resolve call builds its
    own query and candidate set, nothing is cached between calls.
    """

    def __init__(
        self,
        settings: Optional[ArtworkSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        providers: Optional[Sequence[BaseArtworkProvider]] = None,
        validator: Optional[ExistenceValidator] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or ArtworkSettings.from_env()
        if providers is None:
            providers = build_default_providers(self.settings, client=client)
        if validator is None:
            validator = ExistenceValidator(
                client=client,
                timeout=self.settings.probe_timeout,
                max_concurrency=self.settings.probe_concurrency,
            )
        self.providers = list(providers)
        self.validator = validator
        self.aggregator = ArtworkAggregator(self.providers, self.validator)
        self.rng = rng or random.Random()

    async def __aenter__(self) -> "ArtworkResolver":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close provider and validator HTTP clients."""
        for provider in self.providers:
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"Failed to close {provider!r}: {e}")
        await self.validator.close()

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    async def candidates(
        self,
        title: Optional[str],
        platform_hint: PlatformHint = None,
        randomize: bool = False
    ) -> CandidateSet:
        """Merged candidates for a title (empty for a blank title)."""
        query = normalize(
            title,
            platform_hint=PlatformTag.parse(platform_hint),
            randomize=randomize,
            random_pool_size=self.settings.random_pool_size,
        )
        if query is None:
            logger.debug("Blank title, skipping artwork search")
            return CandidateSet()

        return await self.aggregator.resolve(query)

    async def resolve_artwork(
        self,
        title: Optional[str],
        platform_hint: PlatformHint = None,
        randomize: bool = False
    ) -> Optional[str]:
        """
        Best-effort artwork URL for a title, or None.

        Args:
            title: Free-text title, e.g. "黑神话：悟空 (Black Myth: Wukong)"
            platform_hint: PlatformTag or alias; unknown values mean no hint
            randomize: Pick uniformly among the top matches ("reroll")

        Returns:
            An http(s) URL or None. Never raises.
        """
        try:
            found = await self.candidates(title, platform_hint, randomize)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Artwork resolution failed for '{title}': {type(e).__name__}: {e}")
            return None

        url = select(found, randomize=randomize, rng=self.rng)
        if url:
            logger.info(f"Artwork for '{title}': {url}")
        else:
            logger.warning(f"No artwork found for '{title}'")
        return url

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def get_available_providers(self) -> Dict[str, str]:
        """Provider ids mapped to display names, in priority order."""
        return {provider.id.value: provider.name for provider in self.providers}

    async def health_check(self) -> Dict[str, bool]:
        """
        Check every provider with a well-known title.

        The box-art archive gets a platform hint and its guesses are
        validated, so a healthy result means the archive actually served
        an image.
        """
        async def _check(provider: BaseArtworkProvider):
            hint = PlatformTag.GAME_BOY if provider.requires_platform else None
            found = await self.aggregator.run_provider(provider, HEALTH_CHECK_TERM, hint, 1)
            return provider.id.value, bool(found)

        results = await asyncio.gather(
            *(_check(provider) for provider in self.providers),
            return_exceptions=True
        )

        status: Dict[str, bool] = {}
        for provider, result in zip(self.providers, results):
            if isinstance(result, BaseException):
                logger.error(f"Health check failed for {provider.id.value}: {result}")
                status[provider.id.value] = False
            else:
                status[result[0]] = result[1]
        return status


async def resolve_artwork(
    title: Optional[str],
    platform_hint: PlatformHint = None,
    randomize: bool = False,
    settings: Optional[ArtworkSettings] = None,
) -> Optional[str]:
    """Resolve one title with a short-lived resolver."""
    if normalize(title) is None:
        return None
    async with ArtworkResolver(settings=settings) as resolver:
        return await resolver.resolve_artwork(title, platform_hint, randomize)
