"""
================================================================================
GameShelf - Base Artwork Provider
================================================================================
Abstract base class for all external artwork catalogs.

Catalogs (in merge priority order):
  - Box-art archive (libretro thumbnails, static files)
  - Deal aggregator (CheapShark)
  - Encyclopedia thumbnails (Wikipedia)
  - App store artwork (iTunes Search)

Every provider honours one contract: search() returns a list of candidates
and never raises. Network errors, timeouts and malformed payloads all
degrade to an empty list so one catalog's outage cannot fail a resolution.
================================================================================
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
import time
import asyncio
import logging

import httpx

from ..models import Candidate, PlatformTag, ProviderId


logger = logging.getLogger(__name__)


class ProviderResponseError(Exception):
    """Raised when a catalog answers with a payload we cannot interpret."""

    def __init__(self, provider_id: str, message: str):
        self.provider_id = provider_id
        super().__init__(f"{provider_id}: {message}")


class RateLimiter:
    """
    Token-bucket rate limiter for API requests.

    One instance per provider, so catalogs never wait on each other. Up to
    `burst` requests go out back to back; after that, slots refill at
    requests_per_minute / 60 per second. A rate of 0 disables limiting.
    """

    def __init__(self, requests_per_minute: int, burst: int = 1):
        """
        Initialize rate limiter.

        Args:
            requests_per_minute: Sustained requests allowed per minute
            burst: Requests allowed back to back before spacing kicks in
        """
        self.requests_per_minute = requests_per_minute
        self.burst = max(1, burst)
        self.rate = requests_per_minute / 60.0  # Tokens per second
        self.tokens = float(self.burst)
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self):
        now = time.monotonic()
        self.tokens = min(self.burst, self.tokens + (now - self.last_refill) * self.rate)
        self.last_refill = now

    async def acquire(self):
        """Wait until a request slot is available."""
        if self.rate <= 0:
            return

        # Waiters queue on the lock, so slots are handed out in arrival order
        async with self._lock:
            self._refill()
            if self.tokens < 1:
                wait_time = (1 - self.tokens) / self.rate
                logger.debug(f"Rate limit: waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._refill()
            self.tokens = max(0.0, self.tokens - 1)


class BaseArtworkProvider(ABC):
    """
    Abstract base class for artwork providers.

    Subclasses implement _search(), which may raise freely. The public
    search() wraps it with a timeout and turns every failure into [].
    """

    # Provider identification
    id: ProviderId = None
    name: str = "Base Provider"

    # API configuration
    base_url: str = ""

    # Rate limiting (requests per minute; 0 = no limit). The burst covers
    # one batch worth of concurrent resolutions.
    rate_limit: int = 60
    rate_burst: int = 5

    # Catalog request timeout (seconds), retries included. Time spent
    # queueing for a rate-limit slot is not counted.
    timeout: float = 8.0

    # Retry configuration
    max_retries: int = 2
    retry_delay: float = 0.5

    # Wikipedia and iTunes both ask for an identifying User-Agent
    user_agent: str = "GameShelf/1.0 (+https://github.com/gameshelf/gameshelf)"

    # Box-art archive only: needs a platform, returns unchecked paths
    requires_platform: bool = False
    requires_validation: bool = False

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            client: Shared HTTP client. Injected clients are never closed here.
            timeout: Override for the whole-search timeout.
        """
        if timeout is not None:
            self.timeout = timeout
        self.rate_limiter = RateLimiter(self.rate_limit, self.rate_burst)
        self._client: Optional[httpx.AsyncClient] = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={
                    'User-Agent': self.user_agent,
                    'Accept': 'application/json'
                }
            )
            self._owns_client = True
        return self._client

    async def close(self):
        """Close HTTP client if this provider created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def _request(
        self,
        method: str,
        url: str,
        **kwargs
    ) -> Any:
        """
        Make rate-limited HTTP request with retries.

        Args:
            method: HTTP method
            url: Full URL
            **kwargs: Additional arguments for httpx

        Returns:
            Decoded JSON body

        Raises:
            httpx.HTTPError: On request failure after retries
            ProviderResponseError: If the body is not JSON
        """
        client = await self._get_client()
        kwargs.setdefault('headers', {'User-Agent': self.user_agent})

        for attempt in range(self.max_retries + 1):
            last_attempt = attempt >= self.max_retries
            try:
                if attempt > 0:
                    # search() took the slot for the first attempt
                    await self.rate_limiter.acquire()

                response = await client.request(method, url, **kwargs)
                response.raise_for_status()

                try:
                    return response.json()
                except ValueError as e:
                    raise ProviderResponseError(self.id.value, f"invalid JSON: {e}") from e

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if last_attempt:
                    raise
                if status == 429:  # Rate limited
                    wait_time = self.retry_delay * (2 ** attempt)  # Exponential backoff
                    logger.warning(f"{self.id.value}: Rate limited (429), waiting {wait_time}s")
                    await asyncio.sleep(wait_time)
                    continue
                if status >= 500:
                    logger.warning(
                        f"{self.id.value}: Server error ({status}), "
                        f"retry {attempt + 1}/{self.max_retries}"
                    )
                    await asyncio.sleep(self.retry_delay)
                    continue
                raise

            except httpx.TransportError as e:
                if last_attempt:
                    raise
                logger.warning(
                    f"{self.id.value}: Request error ({e}), "
                    f"retry {attempt + 1}/{self.max_retries}"
                )
                await asyncio.sleep(self.retry_delay)

        raise ProviderResponseError(self.id.value, "max retries exceeded")

    # =========================================================================
    # SEARCH
    # =========================================================================

    @abstractmethod
    async def _search(
        self,
        term: str,
        platform_hint: Optional[PlatformTag],
        limit: int
    ) -> List[Candidate]:
        """
        Query the catalog. May raise; search() absorbs failures.

        Args:
            term: Search term, unsanitized
            platform_hint: Optional platform narrowing
            limit: Maximum candidates wanted

        Returns:
            Candidates in the catalog's best-first order
        """
        pass

    async def search(
        self,
        term: str,
        platform_hint: Optional[PlatformTag] = None,
        limit: int = 1
    ) -> List[Candidate]:
        """
        Search the catalog without ever raising.

        Concurrent searches wait their turn on the rate limiter before the
        timeout starts, so a busy catalog is slower but not emptier.

        Returns:
            Candidates, or [] on timeout, network error or bad payload
        """
        if not term or not term.strip():
            return []
        if self.requires_platform and platform_hint is None:
            return []

        # Queue for a slot first; the timeout only bounds the catalog call
        await self.rate_limiter.acquire()

        try:
            results = await asyncio.wait_for(
                self._search(term, platform_hint, max(1, limit)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"{self.id.value}: search timed out after {self.timeout}s for '{term}'")
            return []
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"{self.id.value}: search failed for '{term}': {type(e).__name__}: {e}")
            return []

        candidates = [c for c in (results or []) if isinstance(c, Candidate)]
        logger.debug(f"{self.id.value}: {len(candidates)} candidates for '{term}'")
        return candidates

    def _candidate(self, url: str) -> Candidate:
        return Candidate(url=url, provider=self.id)

    def __repr__(self):
        return f"<{self.__class__.__name__}(id='{self.id.value}', rate_limit={self.rate_limit}/min)>"
