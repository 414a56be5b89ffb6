"""Tests for relevance filtering."""

import pytest

from feed_harvest.config import PipelineConfig
from feed_harvest.processing.assembler import AiRecord
from feed_harvest.processing.relevance import RelevanceFilter, filter_relevance


def _record(title: str, score: int) -> AiRecord:
    return AiRecord(title=title, source=f"https://example.org/{title}", timestamp="2025-01-01T00:00:00+00:00",
                    keyword_score=score)


@pytest.fixture
def records():
    return [_record("a", 0), _record("b", 3), _record("c", 1), _record("d", 2), _record("e", 1)]


def test_threshold_is_inclusive(records):
    kept = RelevanceFilter(threshold=1).filter(records)
    assert [r.title for r in kept] == ["b", "c", "d", "e"]


def test_threshold_zero_keeps_everything(records):
    assert RelevanceFilter(threshold=0).filter(records) == records


def test_order_is_preserved(records):
    kept = RelevanceFilter(threshold=2).filter(records)
    assert [r.title for r in kept] == ["b", "d"]


def test_raising_threshold_never_keeps_more(records):
    counts = [len(RelevanceFilter(threshold=t).filter(records)) for t in range(0, 6)]
    assert counts == sorted(counts, reverse=True)
    assert counts[-1] == 0


def test_disabled_filter_keeps_all(records):
    assert RelevanceFilter(threshold=100, enabled=False).filter(records) == records


def test_filter_relevance_uses_config(records):
    config = PipelineConfig(keyword_score_threshold=3)
    assert [r.title for r in filter_relevance(records, config)] == ["b"]

    disabled = PipelineConfig(keyword_score_threshold=3, filter_by_keywords=False)
    assert len(filter_relevance(records, disabled)) == len(records)
