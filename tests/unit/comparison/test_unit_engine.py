# tests/unit/comparison/test_unit_engine.py - v1
"""Tests for comparison/engine.py - scoring, matches, differences, weights."""

from __future__ import annotations

import pytest

from astroreport.comparison.engine import (
    DIFFERENCE_THRESHOLD,
    MATCH_THRESHOLD,
    ComparisonEngine,
    overall_similarity,
)
from astroreport.comparison.models import ComparisonField, ComparisonSettings, FieldComparison
from astroreport.core.errors import InsufficientInputError
from astroreport.core.models import ReportKind


def _only(*fields: tuple[str, float]) -> ComparisonSettings:
    return ComparisonSettings(compare_fields=[
        ComparisonField(field=name, weight=weight) for name, weight in fields
    ])


@pytest.fixture
def engine() -> ComparisonEngine:
    return ComparisonEngine()


class TestCompare:
    def test_thresholds(self):
        assert (MATCH_THRESHOLD, DIFFERENCE_THRESHOLD) == (0.8, 0.3)

    def test_needs_two_reports(self, engine, make_report):
        with pytest.raises(InsufficientInputError) as info:
            engine.compare([make_report()])
        assert info.value.details == {"count": 1}

    def test_identical_reports(self, engine, make_report):
        result = engine.compare([make_report("a"), make_report("b")])
        assert result.overall_similarity == pytest.approx(1.0)
        assert result.differences == []
        assert {m.field for m in result.similarities} == {
            "content", "report_type", "birth_data", "planetary_positions",
        }
        assert all(m.reports == ["a", "b"] and m.confidence == 1.0 for m in result.similarities)

    def test_summary_field_off_by_default(self, engine, make_report):
        result = engine.compare([make_report("a"), make_report("b")])
        assert result.field("summary") is None

    def test_normalization_ignores_case_and_spacing(self, engine, make_report):
        a = make_report("a", html="Sun  in\nGemini")
        b = make_report("b", html="sun in gemini ")
        result = engine.compare([a, b], _only(("content", 1.0)))
        assert result.field("content").similarity == 1.0

    def test_kind_difference(self, engine, make_report):
        a = make_report("a", kind=ReportKind.WESTERN)
        b = make_report("b", kind=ReportKind.VEDIC)
        result = engine.compare([a, b])

        field = result.field("report_type")
        assert field.similarity == 0.0
        assert field.matches == 0
        [diff] = result.differences
        assert diff.field == "report_type"
        assert diff.significance == "high"
        assert diff.category == "Report Type"
        assert [(v.report_id, v.value) for v in diff.values] == [("a", "western"), ("b", "vedic")]
        # every other default field matches: (1.0 + 0.6 + 0.7) / (1.0 + 0.8 + 0.6 + 0.7)
        assert result.overall_similarity == pytest.approx(2.3 / 3.1)

    def test_difference_count(self, engine, make_report):
        a = make_report("a", html="aaaaaaaa")
        b = make_report("b", html="zzzzzzzz")
        field = engine.compare([a, b], _only(("content", 1.0))).field("content")
        assert (field.matches, field.differences) == (0, 1)

    def test_three_reports_partial_match(self, engine, make_report):
        reports = [
            make_report("a", kind=ReportKind.WESTERN),
            make_report("b", kind=ReportKind.WESTERN),
            make_report("c", kind=ReportKind.HELLENISTIC),
        ]
        result = engine.compare(reports, _only(("report_type", 1.0)))

        field = result.field("report_type")
        assert field.matches == 1
        assert field.similarity == pytest.approx(1 / 3)
        [match] = result.similarities
        assert match.reports == ["a", "b"]
        assert match.confidence == pytest.approx(2 / 3)
        assert result.differences == []

    def test_symmetric(self, engine, make_report):
        a = make_report("a", summary="One", kind=ReportKind.WESTERN, html="<p>first text</p>")
        b = make_report("b", summary="Two", kind=ReportKind.VEDIC, html="<p>second text</p>")
        assert engine.compare([a, b]).overall_similarity == pytest.approx(
            engine.compare([b, a]).overall_similarity
        )

    def test_zero_weight_field_excluded(self, engine, make_report):
        a = make_report("a", kind=ReportKind.WESTERN)
        b = make_report("b", kind=ReportKind.VEDIC)
        settings = _only(("report_type", 0.0), ("birth_data", 1.0))
        result = engine.compare([a, b], settings)
        assert result.field("report_type") is not None
        assert result.overall_similarity == pytest.approx(1.0)

    def test_all_zero_weights(self, engine, make_report):
        result = engine.compare(
            [make_report("a"), make_report("b")], _only(("content", 0.0)),
        )
        assert result.overall_similarity == 0.0

    def test_disabled_fields_skipped(self, engine, make_report):
        settings = ComparisonSettings(compare_fields=[
            ComparisonField(field="content", enabled=False),
            ComparisonField(field="summary", enabled=True),
        ])
        result = engine.compare([make_report("a"), make_report("b")], settings)
        assert [fc.field for fc in result.field_comparisons] == ["summary"]

    def test_overall_in_unit_interval(self, engine, make_report):
        reports = [
            make_report("a", html="alpha beta", planets=[]),
            make_report("b", html="gamma delta", kind=ReportKind.CHINESE),
            make_report("c", html="alpha beta gamma", summary="x"),
        ]
        assert 0.0 <= engine.compare(reports).overall_similarity <= 1.0


class TestOverallSimilarity:
    def test_weighted_mean(self):
        comparisons = [
            FieldComparison(field="content", similarity=1.0, matches=1, differences=0),
            FieldComparison(field="summary", similarity=0.0, matches=0, differences=1),
        ]
        fields = [ComparisonField(field="content", weight=3.0), ComparisonField(field="summary", weight=1.0)]
        assert overall_similarity(comparisons, fields) == pytest.approx(0.75)

    def test_empty(self):
        assert overall_similarity([], []) == 0.0
