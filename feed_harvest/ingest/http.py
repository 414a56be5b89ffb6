"""Shared aiohttp plumbing for feed and page sources."""

import asyncio
from typing import Optional

import aiohttp

from ..config import Settings, get_settings
from ..errors import FetchError
from ..logging import get_logger

logger = get_logger(__name__)


class HttpSource:
    """Base class owning an aiohttp session with a per-request timeout."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout_seconds)
        # Per-host cap matches the page semaphore
        connector = aiohttp.TCPConnector(
            limit=self.settings.global_parallel,
            limit_per_host=self.settings.global_parallel,
        )

        self.session = aiohttp.ClientSession(
            timeout=timeout,
            connector=connector,
            headers={'User-Agent': self.settings.user_agent}
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()
            self.session = None

    async def _fetch_bytes(self, url: str) -> tuple[bytes, str | None]:
        """Fetch URL body as bytes along with the declared charset.

        Raises:
            FetchError: On network errors, timeouts and HTTP status >= 400
        """
        if not self.session:
            raise RuntimeError("Session not initialized. Use async context manager.")

        logger.debug("Fetching URL", url=url)

        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise FetchError(url, f"HTTP {response.status}")
                body = await response.read()
                logger.debug(
                    "URL fetched successfully",
                    url=url,
                    status=response.status,
                    content_length=len(body)
                )
                return body, response.charset
        except asyncio.TimeoutError as e:
            raise FetchError(url, "request timed out") from e
        except aiohttp.ClientError as e:
            raise FetchError(url, str(e) or e.__class__.__name__) from e

    async def _fetch_text(self, url: str) -> str:
        """Fetch URL body decoded as text."""
        body, charset = await self._fetch_bytes(url)
        try:
            return body.decode(charset or "utf-8", errors="replace")
        except LookupError:
            # Unknown charset label
            return body.decode("utf-8", errors="replace")
