"""Feed and page retrieval."""

from .feeds import FeedHealthMonitor, FeedItem, FeedSource, gather_feed_items, parse_feed
from .pages import PageSource

__all__ = [
    'FeedItem',
    'FeedSource',
    'FeedHealthMonitor',
    'PageSource',
    'gather_feed_items',
    'parse_feed',
]
