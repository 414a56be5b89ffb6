"""
Keyword scoring of article text against a category taxonomy.

The relevance score is additive: every whole-word (or whole-phrase)
occurrence of a taxonomy keyword adds one point to its category, and the
total is the sum of the category scores.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordMatch:
    """Matches found for one category."""
    category: str
    score: int
    keywords: tuple[tuple[str, int], ...] = ()

    def to_dict(self) -> dict:
        return {
            'score': self.score,
            'keywords': [{'keyword': k, 'count': c} for k, c in self.keywords],
        }


@dataclass(frozen=True)
class ScoreResult:
    """Total score plus the breakdown of categories that matched."""
    total: int = 0
    categories: dict[str, KeywordMatch] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ScoreResult":
        return cls(total=0, categories={})


def compile_keyword(keyword: str) -> re.Pattern:
    """Pattern matching ``keyword`` only when bounded by non-word characters.

    Word characters are Unicode-aware, so accented letters count as part
    of a word.
    """
    return re.compile(r'(?<!\w)' + re.escape(keyword.lower()) + r'(?!\w)')


class KeywordScorer:
    """Scores text by counting taxonomy keyword occurrences."""

    def __init__(self, taxonomy: Mapping[str, Sequence[str]]):
        self.taxonomy = taxonomy
        self._patterns: list[tuple[str, list[tuple[str, re.Pattern]]]] = [
            (category, [(kw, compile_keyword(kw)) for kw in keywords if kw.strip()])
            for category, keywords in taxonomy.items()
        ]

    def score(self, text: str | None) -> ScoreResult:
        """Score ``text``; categories without any match are left out."""
        if not text:
            return ScoreResult.empty()

        lowercase_text = text.lower()
        total = 0
        categories: dict[str, KeywordMatch] = {}

        for category, patterns in self._patterns:
            found = []
            for keyword, pattern in patterns:
                count = len(pattern.findall(lowercase_text))
                if count > 0:
                    found.append((keyword, count))

            category_score = sum(count for _, count in found)
            if category_score > 0:
                categories[category] = KeywordMatch(
                    category=category,
                    score=category_score,
                    keywords=tuple(found),
                )
                total += category_score

        logger.debug(f"Keyword score {total} across {len(categories)} categories")
        return ScoreResult(total=total, categories=categories)


def score_text(text: str | None, taxonomy: Mapping[str, Sequence[str]]) -> ScoreResult:
    """Convenience function for one-off scoring."""
    return KeywordScorer(taxonomy).score(text)
