"""
Existence checks for guessed artwork URLs.

The box-art archive has no search API, so its candidates are filename
guesses. Each one gets a HEAD probe; only URLs that answer 2xx with an
image content type survive. A failed probe just means "not there".

Usage:
    validator = ExistenceValidator(timeout=5.0, max_concurrency=8)
    live = await validator.validate(urls)
    await validator.close()
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ExistenceValidator:
    """Concurrent HEAD prober with a per-probe timeout."""

    user_agent = "GameShelf/1.0 (+https://github.com/gameshelf/gameshelf)"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        max_concurrency: int = 8,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout
        if user_agent:
            self.user_agent = user_agent
        self.max_concurrency = max(1, max_concurrency)
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={'User-Agent': self.user_agent},
            )
            self._owns_client = True
        return self._client

    async def close(self):
        if self._client and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def exists(self, url: str) -> bool:
        """HEAD one URL. Never raises."""
        try:
            client = await self._get_client()
            response = await asyncio.wait_for(
                client.head(url, follow_redirects=True),
                timeout=self.timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Probe failed for {url}: {type(e).__name__}: {e}")
            return False

        if not response.is_success:
            logger.debug(f"Probe miss for {url}: HTTP {response.status_code}")
            return False

        content_type = response.headers.get('content-type', '').lower()
        if not content_type.startswith('image/'):
            logger.debug(f"Probe miss for {url}: content-type {content_type or 'missing'}")
            return False
        return True

    async def validate(self, urls: Iterable[str]) -> List[str]:
        """
        Keep the URLs that exist and serve an image.

        Input order is preserved; duplicates are probed once.
        """
        unique = list(dict.fromkeys(url for url in urls if url))
        if not unique:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _probe(url: str) -> bool:
            async with semaphore:
                return await self.exists(url)

        outcomes = await asyncio.gather(*(_probe(url) for url in unique), return_exceptions=True)

        alive: Dict[str, bool] = {
            url: outcome is True for url, outcome in zip(unique, outcomes)
        }
        live = [url for url in unique if alive[url]]
        logger.info(f"Existence check: {len(live)}/{len(unique)} URLs reachable")
        return live
