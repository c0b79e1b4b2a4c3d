# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides sample subjects and configs, a manual clock, a report factory,
and a pipeline wired to the deterministic ephemeris. No external services.
"""

from __future__ import annotations

import datetime as dt
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from astroreport.cache.report_cache import ReportCache
from astroreport.config.settings import Settings
from astroreport.core.models import (
    BirthLocation,
    BirthSubject,
    GeneratedReport,
    GenerationConfig,
    RenderedOutputs,
    ReportContent,
    ReportKind,
    ReportMetadata,
    ReportSection,
)
from astroreport.ephemeris.deterministic import DeterministicEphemeris
from astroreport.pipeline.generation_pipeline import GenerationPipeline


class ManualClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_location() -> BirthLocation:
    return BirthLocation(
        name="New York", latitude=40.7128, longitude=-74.006, timezone="America/New_York",
    )


@pytest.fixture
def sample_subject(sample_location: BirthLocation) -> BirthSubject:
    """Complete, valid birth subject."""
    return BirthSubject(
        date=dt.date(1990, 6, 15), time=dt.time(14, 30), location=sample_location, name="Ada",
    )


@pytest.fixture
def partner_subject() -> BirthSubject:
    return BirthSubject(
        date=dt.date(1988, 11, 3),
        time=dt.time(7, 45),
        location=BirthLocation(name="London", latitude=51.5074, longitude=-0.1278, timezone="Europe/London"),
        name="Ben",
    )


@pytest.fixture
def default_config() -> GenerationConfig:
    return GenerationConfig()


@pytest.fixture
def make_report() -> Callable[..., GeneratedReport]:
    """Factory for GeneratedReport objects built without the pipeline."""

    def _make(
        report_id: str = "r1",
        kind: ReportKind = ReportKind.WESTERN,
        html: str = "<html><body><p>Sun in Gemini</p></body></html>",
        summary: str = "A curious chart.",
        subject: BirthSubject | None = None,
        planets: list[dict[str, Any]] | None = None,
        generated_at: datetime | None = None,
        config: GenerationConfig | None = None,
    ) -> GeneratedReport:
        subject = subject or BirthSubject(
            date=dt.date(1990, 6, 15),
            time=dt.time(14, 30),
            location=BirthLocation(name="New York", latitude=40.7128, longitude=-74.006),
        )
        planets = planets if planets is not None else [
            {"name": "Sun", "sign": "Gemini", "degree": 24.1, "longitude": 84.1},
        ]
        return GeneratedReport(
            id=report_id,
            kind=kind,
            subject=subject,
            calculations={"planets": planets},
            content=ReportContent(
                title="Test report",
                summary=summary,
                sections=[ReportSection(key="planets", title="Planets", paragraphs=["Text."])],
            ),
            outputs=RenderedOutputs(html=html),
            metadata=ReportMetadata(
                generated_at=generated_at or datetime(2026, 2, 7, 12, 0, tzinfo=timezone.utc),
                version="1.0",
                fingerprint=report_id,
                config=config or GenerationConfig(),
            ),
        )

    return _make


# === FIXTURES: Engine wiring ===


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2026, 2, 7, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of any local .env file."""
    return Settings(
        _env_file=None,
        pdf_renderer="none",
        batch_item_timeout_seconds=30.0,
        batch_retry_base_delay_seconds=0.0,
    )


@pytest.fixture
def ephemeris() -> DeterministicEphemeris:
    return DeterministicEphemeris()


@pytest.fixture
def report_cache(clock: ManualClock) -> ReportCache:
    return ReportCache(validity=timedelta(hours=24), clock=clock)


@pytest.fixture
def pipeline(
    ephemeris: DeterministicEphemeris,
    report_cache: ReportCache,
    test_settings: Settings,
    clock: ManualClock,
) -> GenerationPipeline:
    return GenerationPipeline(
        calculator=ephemeris, cache=report_cache, settings=test_settings, clock=clock,
    )
