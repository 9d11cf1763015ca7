"""Final pick over a merged candidate set."""

import random
from typing import Optional

from .models import CandidateSet


def select(
    candidates: CandidateSet,
    randomize: bool = False,
    rng: Optional[random.Random] = None,
) -> Optional[str]:
    """
    Pick one URL.

    Without randomize the first (highest priority) candidate wins, so the
    result is stable for a fixed candidate set. With randomize every
    candidate is equally likely; pass a seeded rng for reproducible picks.
    """
    if not candidates:
        return None
    if not randomize or len(candidates) == 1:
        return candidates[0].url

    rng = rng or random.Random()
    return rng.choice(candidates.urls())
