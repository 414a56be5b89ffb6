"""Tests for the feed health check utility."""

import pytest

from feed_harvest.check_feeds import check_all_feeds, display_health_report
from feed_harvest.config import HarvestConfig
from feed_harvest.errors import FetchError
from feed_harvest.ingest.feeds import FeedItem

CONFIG = """
feeds:
  - name: ok
    url: https://feeds.test/ok.xml
  - name: empty
    url: https://feeds.test/empty.xml
  - name: down
    url: https://feeds.test/down.xml
taxonomy:
  technology: [agritech]
"""


@pytest.fixture
def harvest_config(temp_dir):
    path = temp_dir / "harvest.yaml"
    path.write_text(CONFIG, encoding="utf-8")
    return HarvestConfig(path)


@pytest.mark.asyncio
async def test_check_all_feeds(harvest_config, fake_feed_source):
    source = fake_feed_source({
        "https://feeds.test/ok.xml": [FeedItem("a", "https://feeds.test/a")],
        "https://feeds.test/empty.xml": [],
        "https://feeds.test/down.xml": FetchError("https://feeds.test/down.xml", "HTTP 503"),
    })

    report = await check_all_feeds(harvest_config, feed_source=source)

    assert report["summary"] == {"total": 3, "healthy": 1, "degraded": 0, "unhealthy": 2}
    assert report["feeds"]["ok"]["entry_count"] == 1
    assert report["feeds"]["empty"]["last_error"] == "No items found"
    assert report["feeds"]["down"]["last_error"] == "HTTP 503"

    # rendering must cope with healthy and failed entries alike
    display_health_report(report)
