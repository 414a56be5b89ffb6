"""RSS feed retrieval and parsing."""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import feedparser
from bs4 import BeautifulSoup

from ..config import FeedConfig, Settings
from ..errors import FetchError
from ..logging import PerformanceLogger, get_logger, log_error, log_processing_stage
from ..utils import collapse_whitespace
from .http import HttpSource

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeedItem:
    """One syndicated entry, prior to full-text extraction."""
    title: str
    link: str
    content_encoded: Optional[str] = None
    content: Optional[str] = None
    content_snippet: Optional[str] = None
    description: Optional[str] = None
    categories: tuple[str, ...] = field(default_factory=tuple)
    pub_date: Optional[str] = None
    author: Optional[str] = None


def _strip_markup(html: str) -> str:
    """Plain-text rendition of an HTML fragment."""
    if not html:
        return ""
    return collapse_whitespace(BeautifulSoup(html, "html.parser").get_text(" "))


def _entry_to_item(entry: Dict[str, Any]) -> FeedItem:
    """Map a feedparser entry onto a FeedItem."""
    contents = entry.get("content") or []
    content_encoded = contents[0].get("value") if contents else None
    summary = entry.get("summary") or None

    categories = tuple(
        tag.get("term") for tag in entry.get("tags", []) or []
        if tag.get("term")
    )

    return FeedItem(
        title=(entry.get("title") or "").strip(),
        link=(entry.get("link") or "").strip(),
        content_encoded=content_encoded or None,
        content=summary,
        content_snippet=_strip_markup(summary) or None,
        description=entry.get("description") or None,
        categories=categories,
        pub_date=entry.get("published") or None,
        author=entry.get("author") or None,
    )


def parse_feed(document: bytes | str, url: str = "", limit: Optional[int] = None) -> List[FeedItem]:
    """Parse an RSS/Atom document into feed items.

    Args:
        document: Raw feed body
        url: Feed URL, used for error reporting
        limit: Maximum number of items to keep

    Returns:
        Feed items in document order

    Raises:
        FetchError: If the document is malformed and yields no entries
    """
    parsed = feedparser.parse(document)

    if parsed.bozo and not parsed.entries:
        raise FetchError(url, f"malformed feed: {parsed.get('bozo_exception')}")

    entries = parsed.entries if limit is None else parsed.entries[:limit]
    return [_entry_to_item(entry) for entry in entries]


class FeedSource(HttpSource):
    """Fetches and parses RSS feeds over HTTP."""

    def __init__(self, settings: Settings | None = None, max_entries: Optional[int] = None):
        super().__init__(settings)
        self.max_entries = self.settings.max_entries_per_feed if max_entries is None else max_entries

    async def fetch_feed(self, url: str) -> List[FeedItem]:
        """Fetch one feed.

        Raises:
            FetchError: On network failure or a malformed document
        """
        logger.info("Fetching feed", url=url)
        body, _ = await self._fetch_bytes(url)
        return parse_feed(body, url=url, limit=self.max_entries)


class FeedHealthMonitor:
    """Track feed fetch outcomes across runs."""

    def __init__(self, failure_threshold: int = 3):
        self.feed_status: Dict[str, Dict[str, Any]] = {}
        self.failure_threshold = failure_threshold

    def record_success(self, name: str, response_time: float, entry_count: int):
        """Record successful feed fetch."""
        self.feed_status[name] = {
            'status': 'healthy',
            'last_success': datetime.now(timezone.utc),
            'response_time': response_time,
            'entry_count': entry_count,
            'consecutive_failures': 0,
            'last_error': None,
        }
        logger.debug(
            "Feed health: success recorded",
            name=name,
            response_time=response_time,
            entries=entry_count,
        )

    def record_failure(self, name: str, error: str):
        """Record failed feed fetch."""
        status = self.feed_status.setdefault(name, {
            'status': 'unknown',
            'consecutive_failures': 0,
        })

        status['consecutive_failures'] += 1
        status['last_error'] = error
        status['last_failure'] = datetime.now(timezone.utc)

        if status['consecutive_failures'] >= self.failure_threshold:
            status['status'] = 'unhealthy'
            logger.error(
                "Feed marked as unhealthy",
                name=name,
                failures=status['consecutive_failures'],
                error=error,
            )
        else:
            status['status'] = 'degraded'
            logger.warning(
                "Feed experiencing issues",
                name=name,
                failures=status['consecutive_failures'],
                error=error,
            )

    def get_health_report(self) -> Dict[str, Any]:
        """Get health report for all monitored feeds."""
        statuses = [s['status'] for s in self.feed_status.values()]
        report = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'summary': {
                'total': len(statuses),
                'healthy': statuses.count('healthy'),
                'degraded': statuses.count('degraded'),
                'unhealthy': statuses.count('unhealthy'),
            },
            'feeds': self.feed_status,
        }
        logger.info("Feed health report", **report['summary'])
        return report


_health_monitor = FeedHealthMonitor()


def get_feed_health_monitor() -> FeedHealthMonitor:
    """Get global feed health monitor instance."""
    return _health_monitor


async def fetch_feed_safely(
    feed_source: Any,
    feed: FeedConfig,
    health_monitor: Optional[FeedHealthMonitor] = None,
) -> List[FeedItem]:
    """Fetch one feed; any failure degrades to zero items and is recorded."""
    health_monitor = health_monitor or get_feed_health_monitor()
    start = time.monotonic()
    try:
        items = await feed_source.fetch_feed(feed.url)
    except FetchError as e:
        logger.error("Failed to fetch feed", url=feed.url, error=e.message)
        health_monitor.record_failure(feed.label, e.message)
        return []
    except Exception as e:
        logger.error(**log_error(e, context="fetch_feed", url=feed.url))
        health_monitor.record_failure(feed.label, str(e) or e.__class__.__name__)
        return []

    health_monitor.record_success(feed.label, time.monotonic() - start, len(items))
    return items


async def gather_feed_items(
    feed_source: Any,
    feeds: Iterable[FeedConfig],
    health_monitor: Optional[FeedHealthMonitor] = None,
) -> List[FeedItem]:
    """Fetch all feeds concurrently and flatten their items in feed order."""
    feeds = list(feeds)
    if not feeds:
        logger.warning("No feeds configured")
        return []

    with PerformanceLogger("fetch_all_feeds", logger):
        results = await asyncio.gather(
            *(fetch_feed_safely(feed_source, feed, health_monitor) for feed in feeds)
        )

    items = [item for feed_items in results for item in feed_items]

    logger.info(
        **log_processing_stage(
            stage="fetch_all_feeds",
            input_count=len(feeds),
            output_count=len(items)
        )
    )
    return items
