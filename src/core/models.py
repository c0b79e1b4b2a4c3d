# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; subjects, configs and generated reports
are always imported from core.models.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# === SUBJECTS ===


class BirthLocation(BaseModel):
    """Place of birth with coordinates and IANA timezone name."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    latitude: float | None = None
    longitude: float | None = None
    timezone: str = "UTC"


class BirthSubject(BaseModel):
    """Person (or event) a report is generated for.

    Fields are optional so that completeness is checked by the pipeline's
    validation stage and reported as a ValidationError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    date: dt.date | None = None
    time: dt.time | None = None
    location: BirthLocation | None = None
    name: str | None = None


class SubjectPair(BaseModel):
    """Two subjects of a compatibility report."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    primary: BirthSubject
    partner: BirthSubject


Subject = Union[BirthSubject, SubjectPair]


# === GENERATION CONFIG ===


class ReportKind(str, Enum):
    WESTERN = "western"
    VEDIC = "vedic"
    CHINESE = "chinese"
    HELLENISTIC = "hellenistic"
    TRANSIT = "transit"
    COMPATIBILITY = "compatibility"


class DetailLevel(str, Enum):
    BASIC = "basic"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


class GenerationConfig(BaseModel):
    """Options for a single generation. Compared by value.

    Only the content-affecting subset participates in the fingerprint;
    persist, include_pdf, target_format, force_regenerate and owner_id are
    delivery options.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    detail_level: DetailLevel = DetailLevel.DETAILED
    include_charts: bool = True
    include_pdf: bool = False
    persist: bool = False
    force_regenerate: bool = False
    theme: Literal["light", "dark", "mystical"] = "light"
    target_format: Literal["html", "pdf", "both"] = "html"
    sections: tuple[str, ...] | None = None
    transit_start: dt.date | None = None
    transit_days: int = 30
    owner_id: str | None = None

    @property
    def wants_pdf(self) -> bool:
        return self.include_pdf or self.target_format in ("pdf", "both")


# === GENERATED REPORT ===


class ReportSection(BaseModel):
    """A named block of report content: prose and an optional table."""

    key: str
    title: str
    paragraphs: list[str] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)


class ReportContent(BaseModel):
    title: str
    summary: str
    sections: list[ReportSection] = Field(default_factory=list)

    def section(self, key: str) -> ReportSection | None:
        """Return the section with the given key, if rendered."""
        for s in self.sections:
            if s.key == key:
                return s
        return None


class RenderedOutputs(BaseModel):
    """HTML is always present; pdf is an artifact reference when rendered."""

    html: str
    pdf: str | None = None


class ReportMetadata(BaseModel):
    generated_at: dt.datetime
    version: str
    fingerprint: str
    config: GenerationConfig
    word_count: int = 0
    section_count: int = 0
    duration_ms: float = 0.0
    warnings: list[str] = Field(default_factory=list)


class GeneratedReport(BaseModel):
    """The cacheable, comparable output of one generation."""

    id: str
    kind: ReportKind
    subject: Subject
    calculations: dict[str, Any] = Field(default_factory=dict)
    content: ReportContent
    outputs: RenderedOutputs
    metadata: ReportMetadata

    @property
    def owner_id(self) -> str | None:
        return self.metadata.config.owner_id
