"""
Configuration for the artwork resolution pipeline.

Values come from environment variables (create_app loads .env first):

    ARTWORK_PROVIDER_TIMEOUT   - seconds per provider search (default 8)
    ARTWORK_PROBE_TIMEOUT      - seconds per existence probe (default 5)
    ARTWORK_PROBE_CONCURRENCY  - simultaneous existence probes (default 8)
    ARTWORK_RANDOM_POOL_SIZE   - hits per provider when re-rolling (default 3)
    ARTWORK_IMAGE_SIZE         - requested thumbnail edge in px (default 600)
    ARTWORK_BOXART_BASE_URL    - box-art archive root
"""

import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ArtworkSettings:
    """Tunables shared by the providers, the validator and the resolver."""
    provider_timeout: float = 8.0
    probe_timeout: float = 5.0
    probe_concurrency: int = 8
    random_pool_size: int = 3
    image_size: int = 600
    boxart_base_url: str = "https://thumbnails.libretro.com"

    @classmethod
    def from_env(cls) -> "ArtworkSettings":
        defaults = cls()
        return cls(
            provider_timeout=_env_float("ARTWORK_PROVIDER_TIMEOUT", defaults.provider_timeout),
            probe_timeout=_env_float("ARTWORK_PROBE_TIMEOUT", defaults.probe_timeout),
            probe_concurrency=_env_int("ARTWORK_PROBE_CONCURRENCY", defaults.probe_concurrency),
            random_pool_size=_env_int("ARTWORK_RANDOM_POOL_SIZE", defaults.random_pool_size),
            image_size=_env_int("ARTWORK_IMAGE_SIZE", defaults.image_size),
            boxart_base_url=(
                os.environ.get("ARTWORK_BOXART_BASE_URL", "").strip().rstrip("/")
                or defaults.boxart_base_url
            ),
        )
