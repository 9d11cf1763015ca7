"""
Artwork catalog providers.

PROVIDER_CLASSES is the merge priority order: archive box art first,
generic catalogs last.
"""

from typing import List, Optional

import httpx

from ..config import ArtworkSettings
from .base import BaseArtworkProvider, ProviderResponseError, RateLimiter
from .boxart_archive import BoxArtArchiveProvider
from .deal_aggregator import DealAggregatorProvider
from .encyclopedia import EncyclopediaThumbnailProvider
from .app_store import AppStoreArtProvider

PROVIDER_CLASSES = (
    BoxArtArchiveProvider,
    DealAggregatorProvider,
    EncyclopediaThumbnailProvider,
    AppStoreArtProvider,
)


def build_default_providers(
    settings: Optional[ArtworkSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[BaseArtworkProvider]:
    """Instantiate the four catalogs in priority order."""
    settings = settings or ArtworkSettings()
    timeout = settings.provider_timeout
    return [
        BoxArtArchiveProvider(client=client, timeout=timeout, base_url=settings.boxart_base_url),
        DealAggregatorProvider(client=client, timeout=timeout),
        EncyclopediaThumbnailProvider(client=client, timeout=timeout, thumb_size=settings.image_size),
        AppStoreArtProvider(client=client, timeout=timeout, image_size=settings.image_size),
    ]


__all__ = [
    'BaseArtworkProvider',
    'ProviderResponseError',
    'RateLimiter',
    'BoxArtArchiveProvider',
    'DealAggregatorProvider',
    'EncyclopediaThumbnailProvider',
    'AppStoreArtProvider',
    'PROVIDER_CLASSES',
    'build_default_providers',
]
