# src/core/errors.py - v1
"""Error taxonomy for report generation and comparison.

Every engine failure derives from ReportError and carries a stable string
code, the stage it failed in (when known) and free-form details. Callers
branch on ``code`` rather than on message text; ``to_info()`` produces the
serializable projection used in progress states and batch results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ErrorInfo(BaseModel):
    """Serializable description of a ReportError."""

    code: str
    message: str
    stage: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] = Field(default_factory=dict)


class ReportError(Exception):
    """Base class for all report engine errors."""

    code: str = "REPORT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.details = dict(details or {})

    def with_stage(self, stage: str) -> ReportError:
        """Attach the failing stage if none was recorded yet."""
        if self.stage is None:
            self.stage = stage
        return self

    def to_info(self) -> ErrorInfo:
        return ErrorInfo(
            code=self.code,
            message=self.message,
            stage=self.stage,
            details=self.details,
        )

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.code}] {self.message} (stage: {self.stage})"
        return f"[{self.code}] {self.message}"


class ValidationError(ReportError):
    """Subject or config is incomplete or structurally invalid.

    User-correctable; never retried.
    """

    code = "VALIDATION_ERROR"


class CalculationError(ReportError):
    """The ephemeris calculator or kind-specific calculation failed."""

    code = "CALCULATION_ERROR"


class ComposeError(ReportError):
    """Content synthesis or formatting failed."""

    code = "COMPOSE_ERROR"


class GenerationCancelledError(ReportError):
    """Generation was cancelled by the caller."""

    code = "CANCELLED"


class GenerationTimeoutError(ReportError):
    """A batch item exceeded its time allowance."""

    code = "TIMEOUT"


class InsufficientInputError(ReportError):
    """A comparison was requested with fewer than two reports."""

    code = "INSUFFICIENT_INPUT"


class PersistenceError(ReportError):
    """The persistence store rejected a save, load or delete."""

    code = "PERSISTENCE_ERROR"


class PdfRenderError(ReportError):
    """The PDF renderer failed; generation degrades to HTML only."""

    code = "PDF_RENDER_ERROR"


class DuplicateGenerationError(ReportError):
    """A generation with the same id is already running."""

    code = "DUPLICATE_GENERATION"


class UnknownFieldError(ReportError):
    """A comparison field id is not present in the field registry."""

    code = "UNKNOWN_FIELD"
