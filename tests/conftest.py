"""Pytest configuration and fixtures."""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["JSON_LOGGING"] = "false"

from feed_harvest.config import FeedConfig, PipelineConfig, Settings, SiteProfile, SiteProfileRule  # noqa: E402
from feed_harvest.errors import FetchError  # noqa: E402
from feed_harvest.ingest.feeds import FeedItem  # noqa: E402


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def settings(temp_dir) -> Settings:
    """Settings writing into a temporary output directory."""
    return Settings(_env_file=None, output_dir=temp_dir / "output")


@pytest.fixture
def taxonomy():
    """Small taxonomy mirroring the packaged one."""
    return {
        "technology": ("agritech", "énergie solaire", "e-commerce"),
        "economy": ("croissance économique", "microfinance"),
        "politics": ("diplomatie Sud-Sud",),
    }


@pytest.fixture
def lemonde_profile() -> SiteProfile:
    return SiteProfile(
        name="lemonde.fr",
        article_selectors=("article", ".article__content", ".article__body", "main"),
        paragraph_selector="p",
        min_paragraph_length=50,
    )


@pytest.fixture
def pipeline_config(taxonomy, lemonde_profile) -> PipelineConfig:
    """Pipeline configuration with two test feeds."""
    return PipelineConfig(
        feeds=(
            FeedConfig(name="une", url="https://feeds.test/une.xml"),
            FeedConfig(name="economie", url="https://feeds.test/economie.xml"),
        ),
        taxonomy=taxonomy,
        site_profiles=(SiteProfileRule(match="lemonde.fr", profile=lemonde_profile),),
        keyword_score_threshold=1,
    )


@pytest.fixture
def sample_item() -> FeedItem:
    """Sample feed item for testing."""
    return FeedItem(
        title="Agritech au Sahel",
        link="https://www.lemonde.fr/afrique/article/agritech.html",
        content_encoded="<p>Contenu riche</p>",
        content="<p>Résumé</p>",
        content_snippet="Résumé",
        description="<p>Résumé</p>",
        categories=("Afrique", "Économie"),
        pub_date="Mon, 06 Jan 2025 10:00:00 +0100",
        author="Jean Dupont",
    )


class FakeFeedSource:
    """In-memory feed source: url -> items, or an exception to raise."""

    def __init__(self, feeds: dict):
        self.feeds = feeds
        self.requested: list[str] = []

    async def fetch_feed(self, url: str):
        self.requested.append(url)
        result = self.feeds.get(url, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakePageSource:
    """In-memory page source: url -> html, or an exception to raise.

    ``delays`` lets a page answer later than its siblings.
    """

    def __init__(self, pages: dict, delays: dict | None = None):
        self.pages = pages
        self.delays = delays or {}
        self.requested: list[str] = []

    async def fetch_page(self, url: str) -> str:
        self.requested.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        result = self.pages.get(url)
        if result is None:
            raise FetchError(url, "HTTP 404")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_feed_source():
    return FakeFeedSource


@pytest.fixture
def fake_page_source():
    return FakePageSource
