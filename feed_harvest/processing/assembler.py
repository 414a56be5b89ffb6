"""Assembly of feed metadata, extracted text and scores into output records."""

import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ..config import PipelineConfig
from ..ingest.feeds import FeedItem
from ..utils import utc_now_iso
from .scoring import KeywordMatch, ScoreResult

logger = logging.getLogger(__name__)

TextCandidate = Callable[[FeedItem, str], Optional[str]]

# Ordered by precedence: the first non-empty candidate is the text that gets scored.
TEXT_CANDIDATES: tuple[tuple[str, TextCandidate], ...] = (
    ("extracted", lambda item, extracted: extracted),
    ("content_encoded", lambda item, extracted: item.content_encoded),
    ("content", lambda item, extracted: item.content),
    ("content_snippet", lambda item, extracted: item.content_snippet),
    ("description", lambda item, extracted: item.description),
)

# Feed-side text only, same order.
SUMMARY_CANDIDATES = TEXT_CANDIDATES[1:]


def _first_non_empty(candidates, item: FeedItem, extracted_text: str) -> str:
    for _name, candidate in candidates:
        value = candidate(item, extracted_text)
        if value:
            return value
    return ""


def select_scoring_text(item: FeedItem, extracted_text: str = "") -> str:
    """Text to score: extracted page text, else the richest feed field."""
    return _first_non_empty(TEXT_CANDIDATES, item, extracted_text)


def select_summary(item: FeedItem) -> str:
    """The feed's own summary content, richest field first."""
    return _first_non_empty(SUMMARY_CANDIDATES, item, "")


class AiRecord(BaseModel):
    """One harvested article, ready to be persisted."""
    model_config = ConfigDict(frozen=True)

    title: str
    source: str
    timestamp: str
    keyword_score: int = Field(0, serialization_alias="keywordScore")
    keyword_categories: dict[str, KeywordMatch] = Field(
        default_factory=dict, serialization_alias="keywordCategories"
    )
    full_content: str | None = Field(None, serialization_alias="fullContent")
    summary_content: str | None = Field(None, serialization_alias="summaryContent")
    categories: tuple[str, ...] | None = None
    publish_date: str | None = Field(None, serialization_alias="publishDate")
    author: str | None = None

    @field_serializer("keyword_categories")
    def _serialize_categories(self, categories: dict[str, KeywordMatch]) -> dict[str, Any]:
        return {name: match.to_dict() for name, match in categories.items()}

    def to_json_dict(self) -> dict[str, Any]:
        """Wire representation; fields that were not attached are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ArticleAssembler:
    """Builds AiRecords according to the pipeline's inclusion flags."""

    def __init__(self, config: PipelineConfig):
        self.config = config

    def assemble(self, item: FeedItem, extracted_text: str, score: ScoreResult) -> AiRecord:
        """Merge one feed item with its extracted text and score."""
        fields: dict[str, Any] = {
            'title': item.title or "",
            'source': item.link or "",
            'timestamp': utc_now_iso(),
            'keyword_score': score.total,
            'keyword_categories': dict(score.categories),
        }

        if extracted_text:
            fields['full_content'] = extracted_text

        if self.config.include_content:
            summary = select_summary(item)
            if summary:
                fields['summary_content'] = summary

        if self.config.include_categories and item.categories:
            fields['categories'] = tuple(item.categories)

        if self.config.include_publish_date and item.pub_date:
            fields['publish_date'] = item.pub_date

        if item.author:
            fields['author'] = item.author

        return AiRecord(**fields)
