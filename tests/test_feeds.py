"""Tests for RSS feed parsing and gathering."""

import pytest

from feed_harvest.config import FeedConfig
from feed_harvest.errors import FetchError
from feed_harvest.ingest.feeds import FeedHealthMonitor, FeedItem, gather_feed_items, parse_feed

RSS_DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Le Monde.fr - Actualités et Infos en France et dans le monde</title>
    <link>https://www.lemonde.fr</link>
    <description>Le Monde.fr - 1er site d'information.</description>
    <item>
      <title>Au Sahel, l'agritech mise sur l'énergie solaire</title>
      <link>https://www.lemonde.fr/afrique/article/2025/01/06/agritech.html</link>
      <description><![CDATA[<p>Résumé <b>agritech</b></p>]]></description>
      <content:encoded><![CDATA[<p>Texte complet de l'article.</p>]]></content:encoded>
      <category>Afrique</category>
      <category>Économie</category>
      <pubDate>Mon, 06 Jan 2025 10:00:00 +0100</pubDate>
      <dc:creator>Jean Dupont</dc:creator>
    </item>
    <item>
      <title>Deuxième article</title>
      <link>https://www.lemonde.fr/politique/article/2025/01/06/second.html</link>
      <description>Résumé simple</description>
    </item>
    <item>
      <title>Troisième article</title>
      <link>https://www.lemonde.fr/economie/article/2025/01/06/third.html</link>
    </item>
  </channel>
</rss>
""".encode("utf-8")


class TestParseFeed:
    """Test parse_feed."""

    def test_parses_items_in_order(self):
        items = parse_feed(RSS_DOCUMENT)
        assert [item.title for item in items] == [
            "Au Sahel, l'agritech mise sur l'énergie solaire",
            "Deuxième article",
            "Troisième article",
        ]

    def test_maps_entry_fields(self):
        item = parse_feed(RSS_DOCUMENT)[0]

        assert item.link == "https://www.lemonde.fr/afrique/article/2025/01/06/agritech.html"
        assert "Texte complet de l'article." in item.content_encoded
        assert "agritech" in item.content
        assert item.content_snippet == "Résumé agritech"
        assert item.description == item.content
        assert item.categories == ("Afrique", "Économie")
        assert item.pub_date == "Mon, 06 Jan 2025 10:00:00 +0100"
        assert item.author == "Jean Dupont"

    def test_missing_optional_fields(self):
        item = parse_feed(RSS_DOCUMENT)[2]

        assert item.content_encoded is None
        assert item.content is None
        assert item.content_snippet is None
        assert item.categories == ()
        assert item.pub_date is None
        assert item.author is None

    @pytest.mark.parametrize("limit, expected", [(0, 0), (2, 2), (50, 3), (None, 3)])
    def test_limit(self, limit, expected):
        assert len(parse_feed(RSS_DOCUMENT, limit=limit)) == expected

    def test_malformed_document_raises_fetch_error(self):
        with pytest.raises(FetchError) as exc_info:
            parse_feed(b"this is not a feed", url="https://feeds.test/broken.xml")
        assert exc_info.value.url == "https://feeds.test/broken.xml"


class TestGatherFeedItems:
    """Test concurrent feed gathering."""

    @pytest.mark.asyncio
    async def test_flattens_in_feed_order(self, fake_feed_source):
        feeds = [FeedConfig(url="https://feeds.test/a.xml"), FeedConfig(url="https://feeds.test/b.xml")]
        source = fake_feed_source({
            "https://feeds.test/a.xml": [FeedItem("a1", "l"), FeedItem("a2", "l")],
            "https://feeds.test/b.xml": [FeedItem("b1", "l")],
        })

        items = await gather_feed_items(source, feeds, FeedHealthMonitor())

        assert [item.title for item in items] == ["a1", "a2", "b1"]

    @pytest.mark.asyncio
    async def test_failed_feed_contributes_nothing(self, fake_feed_source):
        feeds = [FeedConfig(name="down", url="https://feeds.test/down.xml"),
                 FeedConfig(name="up", url="https://feeds.test/up.xml")]
        source = fake_feed_source({
            "https://feeds.test/down.xml": FetchError("https://feeds.test/down.xml", "HTTP 503"),
            "https://feeds.test/up.xml": [FeedItem("ok", "l")],
        })
        monitor = FeedHealthMonitor()

        items = await gather_feed_items(source, feeds, monitor)

        assert [item.title for item in items] == ["ok"]
        assert monitor.feed_status["down"]["status"] == "degraded"
        assert monitor.feed_status["down"]["last_error"] == "HTTP 503"
        assert monitor.feed_status["up"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_unexpected_feed_error_is_isolated(self, fake_feed_source):
        feeds = [FeedConfig(name="broken", url="https://feeds.test/broken.xml"),
                 FeedConfig(name="up", url="https://feeds.test/up.xml")]
        source = fake_feed_source({
            "https://feeds.test/broken.xml": ValueError("unexpected"),
            "https://feeds.test/up.xml": [FeedItem("ok", "l")],
        })
        monitor = FeedHealthMonitor()

        items = await gather_feed_items(source, feeds, monitor)

        assert [item.title for item in items] == ["ok"]
        assert monitor.feed_status["broken"]["last_error"] == "unexpected"
        assert monitor.feed_status["up"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_no_feeds(self, fake_feed_source):
        assert await gather_feed_items(fake_feed_source({}), []) == []


def test_health_monitor_marks_unhealthy_after_threshold():
    monitor = FeedHealthMonitor(failure_threshold=2)
    monitor.record_failure("feed", "timeout")
    monitor.record_failure("feed", "timeout")

    report = monitor.get_health_report()

    assert report["feeds"]["feed"]["status"] == "unhealthy"
    assert report["summary"] == {"total": 1, "healthy": 0, "degraded": 0, "unhealthy": 1}
