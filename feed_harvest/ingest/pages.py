"""Article page retrieval."""

import asyncio

from ..config import Settings
from ..logging import get_logger
from .http import HttpSource

logger = get_logger(__name__)


class PageSource(HttpSource):
    """Fetches raw article HTML, bounded by a global concurrency limit."""

    def __init__(self, settings: Settings | None = None):
        super().__init__(settings)
        self._semaphore = asyncio.Semaphore(self.settings.global_parallel)

    async def fetch_page(self, url: str) -> str:
        """Fetch one article page.

        Raises:
            FetchError: On network errors, timeouts and HTTP status >= 400
        """
        async with self._semaphore:
            return await self._fetch_text(url)
