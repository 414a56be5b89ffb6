"""Article body extraction from fetched pages."""

from dataclasses import dataclass
from typing import Protocol

from selectolax.parser import HTMLParser

from ..config import SiteProfile
from ..errors import FetchError, ParseError
from ..logging import get_logger
from ..utils import collapse_whitespace, extract_domain, normalize_hostname
from .profiles import ProfileResolver

logger = get_logger(__name__)

PARAGRAPH_SEPARATOR = "\n\n"


class PageFetcher(Protocol):
    async def fetch_page(self, url: str) -> str: ...


@dataclass
class ExtractedContent:
    """Plain text pulled from an article page."""
    text: str
    domain: str
    length: int = 0

    def __post_init__(self):
        self.length = len(self.text)


def parse_document(html: str, url: str = "") -> HTMLParser:
    """Parse raw HTML into a traversable document.

    Raises:
        ParseError: If the document cannot be parsed
    """
    if not isinstance(html, str):
        raise ParseError(url, f"expected HTML text, got {type(html).__name__}")
    try:
        return HTMLParser(html)
    except (TypeError, ValueError) as e:
        raise ParseError(url, str(e)) from e


def _select_first(document: HTMLParser, selectors):
    for selector in selectors:
        element = document.css_first(selector)
        if element is not None:
            return element
    return None


def extract_content(document: HTMLParser, profile: SiteProfile) -> str:
    """Best-effort plain-text article body.

    The first container matched by ``profile.article_selectors`` supplies
    its paragraphs, or its whole text when it has no paragraph text. Without
    a container, every paragraph in the document longer than
    ``profile.min_paragraph_length`` is kept. Whitespace is collapsed.

    Raises:
        ParseError: If a configured selector is rejected by the parser
    """
    try:
        container = _select_first(document, profile.article_selectors)

        if container is not None:
            paragraphs = [p.text() for p in container.css(profile.paragraph_selector)]
            content = PARAGRAPH_SEPARATOR.join(paragraphs)
            if not content.strip():
                content = container.text()
        else:
            paragraphs = [
                p.text() for p in document.css(profile.paragraph_selector)
                if len(p.text()) > profile.min_paragraph_length
            ]
            content = PARAGRAPH_SEPARATOR.join(paragraphs)
    except ValueError as e:
        raise ParseError("", f"selector error in profile {profile.name}: {e}") from e

    return collapse_whitespace(content)


class ContentExtractor:
    """Fetches an article page and extracts its body using the site profile."""

    def __init__(self, page_source: PageFetcher, resolver: ProfileResolver):
        self.page_source = page_source
        self.resolver = resolver

    async def extract(self, url: str) -> ExtractedContent:
        """Extract the article body behind ``url``.

        Never raises for fetch or parse failures: they are logged and an
        empty result is returned.
        """
        domain = normalize_hostname(extract_domain(url)) if url else ""
        if not url:
            return ExtractedContent(text="", domain=domain)

        profile = self.resolver.resolve(domain)
        try:
            html = await self.page_source.fetch_page(url)
            document = parse_document(html, url)
            text = extract_content(document, profile)
        except (FetchError, ParseError) as e:
            logger.error(
                "Failed to extract article content",
                url=url,
                error_type=e.__class__.__name__,
                error=e.message,
            )
            return ExtractedContent(text="", domain=domain)

        logger.info(
            "Article content extracted",
            domain=domain,
            profile=profile.name,
            length=len(text),
        )
        return ExtractedContent(text=text, domain=domain)
