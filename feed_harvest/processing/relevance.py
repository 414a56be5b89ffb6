"""
Relevance filtering of assembled records by keyword score.
"""

import logging
from typing import Iterable

from ..config import PipelineConfig
from .assembler import AiRecord

logger = logging.getLogger(__name__)


class RelevanceFilter:
    """Keeps records whose keyword score reaches the threshold."""

    def __init__(self, threshold: int = 1, enabled: bool = True):
        self.threshold = threshold
        self.enabled = enabled

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "RelevanceFilter":
        return cls(threshold=config.keyword_score_threshold, enabled=config.filter_by_keywords)

    def filter(self, records: Iterable[AiRecord]) -> list[AiRecord]:
        """Order-preserving filter on ``keyword_score >= threshold``."""
        records = list(records)
        if not self.enabled:
            logger.info(f"Keyword filtering disabled, keeping all {len(records)} records")
            return records

        kept = [record for record in records if record.keyword_score >= self.threshold]
        logger.info(f"Filtered to {len(kept)}/{len(records)} records (threshold {self.threshold})")
        return kept


def filter_relevance(records: Iterable[AiRecord], config: PipelineConfig) -> list[AiRecord]:
    """Convenience function for relevance filtering."""
    return RelevanceFilter.from_config(config).filter(records)
