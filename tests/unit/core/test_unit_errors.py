# tests/unit/core/test_unit_errors.py - v1
"""Tests for core/errors.py - error taxonomy and ErrorInfo projection."""

from __future__ import annotations

import pytest

from astroreport.core.errors import (
    CalculationError,
    ComposeError,
    DuplicateGenerationError,
    GenerationCancelledError,
    GenerationTimeoutError,
    InsufficientInputError,
    PdfRenderError,
    PersistenceError,
    ReportError,
    UnknownFieldError,
    ValidationError,
)


class TestErrorCodes:
    @pytest.mark.parametrize("cls,code", [
        (ValidationError, "VALIDATION_ERROR"),
        (CalculationError, "CALCULATION_ERROR"),
        (ComposeError, "COMPOSE_ERROR"),
        (GenerationCancelledError, "CANCELLED"),
        (GenerationTimeoutError, "TIMEOUT"),
        (InsufficientInputError, "INSUFFICIENT_INPUT"),
        (PersistenceError, "PERSISTENCE_ERROR"),
        (PdfRenderError, "PDF_RENDER_ERROR"),
        (DuplicateGenerationError, "DUPLICATE_GENERATION"),
        (UnknownFieldError, "UNKNOWN_FIELD"),
    ])
    def test_stable_codes(self, cls, code):
        error = cls("boom")
        assert error.code == code
        assert isinstance(error, ReportError)


class TestReportError:
    def test_str_with_stage(self):
        error = CalculationError("no ephemeris", stage="calculations")
        assert str(error) == "[CALCULATION_ERROR] no ephemeris (stage: calculations)"

    def test_str_without_stage(self):
        assert str(ValidationError("bad")) == "[VALIDATION_ERROR] bad"

    def test_with_stage_keeps_first(self):
        error = ComposeError("x", stage="analysis")
        error.with_stage("formatting")
        assert error.stage == "analysis"

    def test_with_stage_fills_missing(self):
        assert ComposeError("x").with_stage("formatting").stage == "formatting"

    def test_to_info(self):
        info = ValidationError("bad date", stage="validation", details={"role": "primary"}).to_info()
        assert info.code == "VALIDATION_ERROR"
        assert info.message == "bad date"
        assert info.stage == "validation"
        assert info.details == {"role": "primary"}
        assert info.timestamp.tzinfo is not None

    def test_details_copied(self):
        details = {"a": 1}
        error = ReportError("x", details=details)
        details["a"] = 2
        assert error.details == {"a": 1}
