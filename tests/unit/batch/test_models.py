# tests/unit/batch/test_models.py - v2
"""Tests for batch/models.py."""

from __future__ import annotations

from astroreport.batch.models import BatchItemResult, BatchRequest, BatchResult
from astroreport.core.errors import ErrorInfo
from astroreport.core.models import GenerationConfig, ReportKind


def _ok(index: int, report) -> BatchItemResult:
    return BatchItemResult(index=index, generation_id=f"b-{index}", status="success", report=report)


def _err(index: int) -> BatchItemResult:
    return BatchItemResult(
        index=index, generation_id=f"b-{index}", status="error",
        error=ErrorInfo(code="VALIDATION_ERROR", message="bad"),
    )


class TestBatchRequest:
    def test_defaults(self, sample_subject):
        request = BatchRequest(subject=sample_subject, kind="vedic")
        assert request.kind is ReportKind.VEDIC
        assert request.config == GenerationConfig()

    def test_from_json(self):
        request = BatchRequest.model_validate({
            "subject": {
                "date": "1990-06-15", "time": "14:30",
                "location": {"latitude": 1.0, "longitude": 2.0},
            },
            "kind": "western",
            "config": {"detail_level": "basic"},
        })
        assert request.subject.date.year == 1990
        assert request.config.detail_level.value == "basic"

    def test_pair_subject(self, sample_subject, partner_subject):
        request = BatchRequest.model_validate({
            "subject": {
                "primary": sample_subject.model_dump(),
                "partner": partner_subject.model_dump(),
            },
            "kind": "compatibility",
        })
        assert request.subject.partner.name == "Ben"


class TestBatchResult:
    def test_aggregates(self, make_report):
        result = BatchResult(batch_id="b", items=[_ok(0, make_report("a")), _err(1), _ok(2, make_report("c"))])
        assert result.succeeded == 2
        assert result.failed == 1
        assert [r.id for r in result.reports] == ["a", "c"]
        assert list(result.errors) == [1]
        assert result.summary == "2 of 3 succeeded"
        assert result.items[0].ok and not result.items[1].ok

    def test_empty(self):
        result = BatchResult(batch_id="b")
        assert result.summary == "0 of 0 succeeded"
