# src/storage/models.py - v2
"""Persistence models: ReportRecord."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from astroreport.core.models import GeneratedReport, ReportKind


class ReportRecord(BaseModel):
    """One persisted report, owned by a single user."""

    report_id: str
    owner_id: str
    kind: ReportKind
    created_at: datetime
    report: GeneratedReport

    @classmethod
    def from_report(cls, report: GeneratedReport, owner_id: str) -> ReportRecord:
        return cls(
            report_id=report.id,
            owner_id=owner_id,
            kind=report.kind,
            created_at=report.metadata.generated_at,
            report=report,
        )
