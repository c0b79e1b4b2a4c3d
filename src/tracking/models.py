# src/tracking/models.py - v2
"""Progress tracking models: ProgressStage, ProgressState.

Stage percentages are fixed so that observers can render a progress bar
without knowing the pipeline internals.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from astroreport.core.errors import ErrorInfo


class ProgressStage(str, Enum):
    PENDING = "pending"
    VALIDATION = "validation"
    CALCULATIONS = "calculations"
    ANALYSIS = "analysis"
    FORMATTING = "formatting"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"


# Forward order of the non-error stages.
STAGE_ORDER: tuple[ProgressStage, ...] = (
    ProgressStage.PENDING,
    ProgressStage.VALIDATION,
    ProgressStage.CALCULATIONS,
    ProgressStage.ANALYSIS,
    ProgressStage.FORMATTING,
    ProgressStage.FINALIZING,
    ProgressStage.COMPLETE,
)

STAGE_PERCENT: dict[ProgressStage, float] = {
    ProgressStage.PENDING: 0.0,
    ProgressStage.VALIDATION: 0.0,
    ProgressStage.CALCULATIONS: 10.0,
    ProgressStage.ANALYSIS: 40.0,
    ProgressStage.FORMATTING: 70.0,
    ProgressStage.FINALIZING: 90.0,
    ProgressStage.COMPLETE: 100.0,
    ProgressStage.ERROR: 0.0,
}

TERMINAL_STAGES = frozenset({ProgressStage.COMPLETE, ProgressStage.ERROR})


class ProgressState(BaseModel):
    """One published progress transition of a generation."""

    generation_id: str
    stage: ProgressStage
    percentage: float = Field(ge=0.0, le=100.0)
    message: str | None = None
    error: ErrorInfo | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES
