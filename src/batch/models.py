# src/batch/models.py - v2
"""Batch generation models: BatchRequest, BatchItemResult, BatchResult."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from astroreport.core.errors import ErrorInfo
from astroreport.core.models import GeneratedReport, GenerationConfig, ReportKind, Subject


class BatchRequest(BaseModel):
    """One generation request inside a batch."""

    subject: Subject
    kind: ReportKind
    config: GenerationConfig = Field(default_factory=GenerationConfig)


class BatchItemResult(BaseModel):
    """Outcome of one batch item, reported at its original index."""

    index: int
    generation_id: str
    status: Literal["success", "error"]
    report: GeneratedReport | None = None
    error: ErrorInfo | None = None
    attempts: int = 1
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == "success"


class BatchResult(BaseModel):
    """Aggregate of a batch run. Items are ordered by original index."""

    batch_id: str
    items: list[BatchItemResult] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def failed(self) -> int:
        return len(self.items) - self.succeeded

    @property
    def reports(self) -> list[GeneratedReport]:
        return [item.report for item in self.items if item.report is not None]

    @property
    def errors(self) -> dict[int, ErrorInfo]:
        return {item.index: item.error for item in self.items if item.error is not None}

    @property
    def summary(self) -> str:
        return f"{self.succeeded} of {len(self.items)} succeeded"
