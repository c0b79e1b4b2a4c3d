# tests/unit/comparison/test_unit_exporter.py - v1
"""Tests for comparison/exporter.py - JSON, CSV and HTML exports."""

from __future__ import annotations

import json

import pytest

from astroreport.comparison.engine import ComparisonEngine
from astroreport.comparison.exporter import (
    CSV_HEADERS,
    PALETTES,
    _slug,
    export_comparison,
    export_csv,
    export_html,
    export_json,
)
from astroreport.comparison.models import ComparisonSettings, ReportComparison
from astroreport.core.models import ReportKind


@pytest.fixture
def reports(make_report):
    return [
        make_report("a", kind=ReportKind.WESTERN),
        make_report("b", kind=ReportKind.VEDIC),
    ]


@pytest.fixture
def comparison() -> ReportComparison:
    return ReportComparison(id="c1", name="Ada vs Ben", report_ids=["a", "b"])


@pytest.fixture
def result(reports):
    return ComparisonEngine().compare(reports)


class TestExportJson:
    def test_document(self, comparison, result):
        document = json.loads(export_json(comparison, result))
        assert document["comparison"]["id"] == "c1"
        assert document["result"]["overall_similarity"] == pytest.approx(result.overall_similarity)
        assert len(document["result"]["field_comparisons"]) == 4


class TestExportCsv:
    def test_rows(self, result):
        lines = export_csv(result).split("\n")
        assert lines[0] == ",".join(CSV_HEADERS)
        assert lines[1] == "content,1.000,1,0"
        assert lines[2].startswith("report_type,0.000,0,")
        assert lines[-1] == ""
        assert len(lines) == 6


class TestExportHtml:
    def test_document(self, comparison, result):
        html = export_html(comparison, result)
        assert "<h1>Ada vs Ben</h1>" in html
        assert "Report Type" in html
        assert "western" in html and "vedic" in html
        assert PALETTES["default"]["difference"] in html

    def test_color_scheme(self, result):
        comparison = ReportComparison(
            id="c1", name="x", report_ids=["a", "b"],
            settings=ComparisonSettings(color_scheme="high-contrast"),
        )
        html = export_html(comparison, result)
        assert PALETTES["high-contrast"]["difference"] in html
        assert "scheme-high-contrast" in html

    def test_sections_toggled(self, result):
        comparison = ReportComparison(
            id="c1", name="x", report_ids=["a", "b"],
            settings=ComparisonSettings(highlight_differences=False, show_similarities=False),
        )
        html = export_html(comparison, result)
        assert "<h2>Differences</h2>" not in html
        assert "<h2>Similarities</h2>" not in html

    def test_name_escaped(self, result):
        comparison = ReportComparison(id="c1", name="<b>bold</b>", report_ids=["a", "b"])
        assert "&lt;b&gt;bold&lt;/b&gt;" in export_html(comparison, result)


class TestExportComparison:
    @pytest.mark.parametrize("fmt,media_type,ext", [
        ("json", "application/json", "json"),
        ("csv", "text/csv", "csv"),
        ("html", "text/html", "html"),
    ])
    def test_artifact(self, comparison, result, fmt, media_type, ext):
        artifact = export_comparison(comparison, result, fmt)
        assert artifact.media_type == media_type
        assert artifact.filename == f"ada-vs-ben.{ext}"
        assert artifact.content.decode("utf-8")

    def test_unsupported(self, comparison, result):
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_comparison(comparison, result, "xlsx")

    def test_slug(self):
        assert _slug("  Ada & Ben: 2026!  ") == "ada-ben-2026"
        assert _slug("***") == "comparison"
