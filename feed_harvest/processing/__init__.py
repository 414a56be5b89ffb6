"""Content processing module."""

from .assembler import AiRecord, ArticleAssembler, select_scoring_text
from .relevance import RelevanceFilter, filter_relevance
from .scoring import KeywordMatch, KeywordScorer, ScoreResult, score_text

__all__ = [
    'AiRecord',
    'ArticleAssembler',
    'select_scoring_text',
    'RelevanceFilter',
    'filter_relevance',
    'KeywordMatch',
    'KeywordScorer',
    'ScoreResult',
    'score_text',
]
