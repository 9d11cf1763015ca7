"""
================================================================================
GameShelf - Artwork Package
================================================================================
Resolves a free-text game title to one artwork URL by querying several
public image catalogs concurrently.

Components:
  - normalizer.py - derives primary/fallback search terms from a title
  - providers/    - one adapter per catalog, never raising
  - validator.py  - HEAD probes for guessed (unchecked) URLs
  - aggregator.py - parallel fan-out, priority merge, dedup, fallback term
  - selector.py   - best match, or uniform pick when re-rolling
  - resolver.py   - the pipeline entry point
================================================================================
"""

from .config import ArtworkSettings
from .models import Candidate, CandidateSet, PlatformTag, ProviderId, SearchQuery
from .normalizer import normalize
from .resolver import ArtworkResolver, resolve_artwork
from .selector import select

__all__ = [
    'ArtworkSettings',
    'ArtworkResolver',
    'Candidate',
    'CandidateSet',
    'PlatformTag',
    'ProviderId',
    'SearchQuery',
    'normalize',
    'resolve_artwork',
    'select',
]
