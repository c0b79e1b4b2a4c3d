# src/comparison/models.py - v1
"""Comparison models: settings, results, saved comparisons, export artifacts."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from astroreport.comparison.fields import FIELD_REGISTRY, get_field_definition


# === SETTINGS ===


class ComparisonField(BaseModel):
    """A field taking part in a comparison, with its weight."""

    field: str
    weight: float = Field(default=1.0, ge=0.0)
    enabled: bool = True
    display_name: str = ""


def default_compare_fields() -> list[ComparisonField]:
    return [
        ComparisonField(
            field=definition.field_id,
            weight=definition.default_weight,
            enabled=definition.enabled_by_default,
            display_name=definition.display_name,
        )
        for definition in FIELD_REGISTRY.values()
    ]


class ComparisonSettings(BaseModel):
    """How reports are compared and how the result is presented.

    Unknown field ids raise UnknownFieldError at construction.
    """

    highlight_differences: bool = True
    show_similarities: bool = True
    compare_fields: list[ComparisonField] = Field(default_factory=default_compare_fields)
    sync_scroll: bool = True
    show_metadata: bool = True
    color_scheme: Literal["default", "high-contrast", "colorblind-friendly"] = "default"

    @field_validator("compare_fields")
    @classmethod
    def _known_fields(cls, fields: list[ComparisonField]) -> list[ComparisonField]:
        for f in fields:
            get_field_definition(f.field)
        return fields

    @property
    def enabled_fields(self) -> list[ComparisonField]:
        return [f for f in self.compare_fields if f.enabled]

    def display_names(self) -> dict[str, str]:
        names = {key: definition.display_name for key, definition in FIELD_REGISTRY.items()}
        names.update({f.field: f.display_name for f in self.compare_fields if f.display_name})
        return names


# === RESULTS ===


class ComparisonMatch(BaseModel):
    """A normalized value shared by two or more reports."""

    field: str
    value: str
    confidence: float
    reports: list[str]


class DifferenceValue(BaseModel):
    report_id: str
    value: str


class ComparisonDifference(BaseModel):
    """A field on which every report holds a distinct value."""

    field: str
    values: list[DifferenceValue]
    significance: Literal["high", "medium", "low"]
    category: str


class FieldComparison(BaseModel):
    field: str
    similarity: float
    matches: int
    differences: int


class ComparisonResult(BaseModel):
    """Derived analysis of a report set; recomputed on demand."""

    similarities: list[ComparisonMatch] = Field(default_factory=list)
    differences: list[ComparisonDifference] = Field(default_factory=list)
    field_comparisons: list[FieldComparison] = Field(default_factory=list)
    overall_similarity: float = 0.0

    def field(self, field_id: str) -> FieldComparison | None:
        for fc in self.field_comparisons:
            if fc.field == field_id:
                return fc
        return None


# === SAVED COMPARISONS ===


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportComparison(BaseModel):
    """A named, saved set of reports to compare."""

    id: str
    name: str
    report_ids: list[str]
    comparison_type: Literal["side-by-side", "overlay", "tabbed"] = "side-by-side"
    owner_id: str | None = None
    settings: ComparisonSettings = Field(default_factory=ComparisonSettings)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class ExportArtifact(BaseModel):
    """Serialized comparison ready to be written or sent."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    media_type: str
    filename: str
