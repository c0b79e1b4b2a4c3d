# tests/unit/comparison/test_unit_models.py - v1
"""Tests for comparison/models.py."""

from __future__ import annotations

import pydantic
import pytest

from astroreport.comparison.models import (
    ComparisonField,
    ComparisonResult,
    ComparisonSettings,
    ExportArtifact,
    FieldComparison,
    ReportComparison,
)
from astroreport.core.errors import UnknownFieldError


class TestComparisonSettings:
    def test_defaults(self):
        settings = ComparisonSettings()
        assert [f.field for f in settings.compare_fields] == [
            "content", "report_type", "birth_data", "planetary_positions", "summary",
        ]
        assert [f.field for f in settings.enabled_fields] == [
            "content", "report_type", "birth_data", "planetary_positions",
        ]
        assert settings.color_scheme == "default"

    def test_unknown_field_rejected(self):
        with pytest.raises(UnknownFieldError):
            ComparisonSettings(compare_fields=[ComparisonField(field="moon_phase")])

    def test_negative_weight_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            ComparisonField(field="content", weight=-0.1)

    def test_unknown_scheme_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            ComparisonSettings(color_scheme="neon")

    def test_display_names(self):
        settings = ComparisonSettings(compare_fields=[
            ComparisonField(field="content", display_name="Full text"),
        ])
        names = settings.display_names()
        assert names["content"] == "Full text"
        assert names["birth_data"] == "Birth Data"


class TestComparisonResult:
    def test_field_lookup(self):
        fc = FieldComparison(field="content", similarity=1.0, matches=1, differences=0)
        result = ComparisonResult(field_comparisons=[fc])
        assert result.field("content") == fc
        assert result.field("summary") is None


class TestReportComparison:
    def test_defaults(self):
        comparison = ReportComparison(id="c1", name="Mine", report_ids=["a", "b"])
        assert comparison.comparison_type == "side-by-side"
        assert comparison.created_at.tzinfo is not None
        assert comparison.settings == ComparisonSettings()


class TestExportArtifact:
    def test_frozen(self):
        artifact = ExportArtifact(content=b"{}", media_type="application/json", filename="x.json")
        with pytest.raises(pydantic.ValidationError):
            artifact.filename = "y.json"
