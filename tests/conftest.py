import asyncio
import os
import sys
from typing import Callable, List, Optional

import httpx

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from gameshelf_app.artwork.models import ProviderId
from gameshelf_app.artwork.providers.base import BaseArtworkProvider, RateLimiter


def run(coro):
    """Drive a coroutine to completion from a sync test."""
    return asyncio.run(coro)


class FakeProvider(BaseArtworkProvider):
    """Provider returning canned URLs after an optional delay."""

    rate_limit = 0

    def __init__(
        self,
        provider_id: ProviderId,
        urls_by_term=None,
        delay: float = 0.0,
        error: Optional[BaseException] = None,
        requires_platform: bool = False,
        requires_validation: bool = False,
        timeout: float = 2.0,
    ):
        super().__init__(timeout=timeout)
        self.id = provider_id
        self.name = provider_id.value
        self.urls_by_term = urls_by_term or {}
        self.delay = delay
        self.error = error
        self.requires_platform = requires_platform
        self.requires_validation = requires_validation
        self.calls: List[tuple] = []

    async def _search(self, term, platform_hint, limit):
        self.calls.append((term, platform_hint, limit))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        urls = self.urls_by_term.get(term, [])
        return [self._candidate(url) for url in urls[:limit]]


class FakeValidator:
    """Validator that accepts a fixed set of URLs without any network."""

    def __init__(self, alive=()):
        self.alive = set(alive)
        self.calls: List[List[str]] = []

    async def validate(self, urls):
        urls = list(urls)
        self.calls.append(urls)
        return [url for url in urls if url in self.alive]

    async def close(self):
        pass


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def unthrottle(*providers):
    """Lift per-provider rate limits so tests never sleep."""
    for provider in providers:
        provider.rate_limiter = RateLimiter(600000)
        provider.retry_delay = 0.0
    return providers
