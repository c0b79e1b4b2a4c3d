# src/pipeline/generation_pipeline.py - v2
"""Generation pipeline: one report request through every stage.

Stages run sequentially and report through the generation's
ProgressTracker:

  pending -> validation -> calculations -> analysis -> formatting
          -> finalizing -> complete

A fresh cached report short-circuits straight to complete; the request's
delivery flags (PDF, persistence) are still applied to it. Every failure is
tagged with the stage it happened in, published once as the ``error`` stage
and re-raised. A cancelled generation never writes the cache.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from astroreport.cache.fingerprint import compute_fingerprint
from astroreport.cache.report_cache import Clock, ReportCache, utc_now
from astroreport.config.settings import Settings
from astroreport.core.errors import (
    ComposeError,
    GenerationCancelledError,
    PdfRenderError,
    PersistenceError,
    ReportError,
    ValidationError,
)
from astroreport.core.models import (
    GeneratedReport,
    GenerationConfig,
    RenderedOutputs,
    ReportKind,
    ReportMetadata,
    Subject,
)
from astroreport.logging.context import set_generation_context, set_stage_context
from astroreport.pipeline.calculations import run_calculations
from astroreport.pipeline.synthesis import compose_content
from astroreport.pipeline.validation import validate_config, validate_request
from astroreport.rendering.base_pdf_renderer import PdfOptions
from astroreport.rendering.html import count_words, render_report_html
from astroreport.storage.models import ReportRecord
from astroreport.tracking.models import ProgressStage

if TYPE_CHECKING:
    from astroreport.ephemeris.base_calculator import BaseEphemerisCalculator
    from astroreport.rendering.base_pdf_renderer import BasePdfRenderer
    from astroreport.storage.base_report_store import BaseReportStore
    from astroreport.tracking.progress import ProgressTracker

logger = logging.getLogger(__name__)

PIPELINE_VERSION = "1.0"


def resolve_config(kind: ReportKind, config: GenerationConfig, clock: Clock) -> GenerationConfig:
    """Fill request-time defaults that affect content.

    The transit window starts today unless given; it is resolved before
    fingerprinting so the same day maps to the same cache entry.
    """
    if ReportKind(kind) is ReportKind.TRANSIT and config.transit_start is None:
        return config.model_copy(update={"transit_start": clock().date()})
    return config


class GenerationPipeline:
    """Runs report generations against a shared cache.

    Usage:
        pipeline = GenerationPipeline(calculator, cache)
        report = await pipeline.run(subject, ReportKind.WESTERN, config, tracker)
    """

    def __init__(
        self,
        calculator: BaseEphemerisCalculator,
        cache: ReportCache,
        pdf_renderer: BasePdfRenderer | None = None,
        store: BaseReportStore | None = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._calculator = calculator
        self._cache = cache
        self._pdf_renderer = pdf_renderer
        self._store = store
        self._settings = settings or Settings()
        self._clock = clock or utc_now

    @property
    def cache(self) -> ReportCache:
        return self._cache

    def fingerprint(self, subject: Subject, kind: ReportKind, config: GenerationConfig) -> str:
        """Fingerprint of a request after default resolution."""
        return compute_fingerprint(subject, kind, resolve_config(kind, config, self._clock))

    async def run(
        self,
        subject: Subject,
        kind: ReportKind,
        config: GenerationConfig,
        tracker: ProgressTracker,
    ) -> GeneratedReport:
        """Generate (or serve from cache) one report.

        Raises:
            ReportError: Any stage failure, tagged with its stage.
            asyncio.CancelledError: If the surrounding task was cancelled.
        """
        kind = ReportKind(kind)
        set_generation_context(tracker.generation_id, kind.value)
        try:
            return await self._run(subject, kind, config, tracker)
        except ReportError as exc:
            exc.with_stage(tracker.stage.value)
            self._fail(tracker, exc)
            raise
        except asyncio.CancelledError:
            self._fail(tracker, GenerationCancelledError(
                "Generation task was cancelled", stage=tracker.stage.value,
            ))
            raise
        except Exception as exc:
            error = ComposeError(
                f"Unexpected failure: {exc}", stage=tracker.stage.value,
            )
            self._fail(tracker, error)
            raise error from exc
        finally:
            set_stage_context(None)

    async def _run(
        self,
        subject: Subject,
        kind: ReportKind,
        config: GenerationConfig,
        tracker: ProgressTracker,
    ) -> GeneratedReport:
        started = time.monotonic()
        tracker.raise_if_cancelled()
        config = resolve_config(kind, config, self._clock)
        fingerprint = compute_fingerprint(subject, kind, config)

        if not config.force_regenerate:
            cached = self._cache.get(fingerprint)
            if cached is not None:
                logger.info("Serving %s report %s from cache", kind.value, fingerprint)
                tracker.start("Report found in cache")
                report = await self._serve_cached(cached, kind, config)
                tracker.complete("Report served from cache")
                return report

        tracker.start("Generation queued")
        logger.info("Generating %s report %s", kind.value, fingerprint)

        self._enter(tracker, ProgressStage.VALIDATION, "Validating request")
        validate_request(
            subject, kind, config,
            today=self._clock().date(),
            year_floor=self._settings.birth_year_floor,
            transit_max_days=self._settings.transit_max_days,
        )

        self._enter(tracker, ProgressStage.CALCULATIONS, "Computing chart")
        calculations = await run_calculations(self._calculator, subject, kind, config)

        self._enter(tracker, ProgressStage.ANALYSIS, "Composing interpretation")
        content = compose_content(kind, subject, calculations, config)

        self._enter(tracker, ProgressStage.FORMATTING, "Rendering outputs")
        generated_at = self._clock()
        warnings: list[str] = []
        html = render_report_html(content, kind, config, calculations, generated_at)
        pdf = await self._render_pdf(html, fingerprint, content.title, config, warnings)

        self._enter(tracker, ProgressStage.FINALIZING, "Storing report")
        report = GeneratedReport(
            id=fingerprint,
            kind=kind,
            subject=subject,
            calculations=calculations,
            content=content,
            outputs=RenderedOutputs(html=html, pdf=pdf),
            metadata=ReportMetadata(
                generated_at=generated_at,
                version=PIPELINE_VERSION,
                fingerprint=fingerprint,
                config=config,
                word_count=count_words(html),
                section_count=len(content.sections),
                duration_ms=round((time.monotonic() - started) * 1000, 2),
                warnings=warnings,
            ),
        )
        tracker.raise_if_cancelled()
        if config.persist:
            await self._persist(report)

        self._cache.put(fingerprint, report)
        tracker.complete("Report ready")
        logger.info(
            "Generated %s report %s: %d sections, %d words, %.0fms",
            kind.value, fingerprint, report.metadata.section_count,
            report.metadata.word_count, report.metadata.duration_ms,
        )
        return report

    # --- Stages ---

    @staticmethod
    def _enter(tracker: ProgressTracker, stage: ProgressStage, message: str) -> None:
        tracker.raise_if_cancelled()
        set_stage_context(stage.value)
        tracker.advance(stage, message)

    async def _serve_cached(
        self,
        cached: GeneratedReport,
        kind: ReportKind,
        config: GenerationConfig,
    ) -> GeneratedReport:
        """Apply the request's delivery flags to a cached report.

        The cached entry itself is never modified: a missing PDF is rendered
        and a persistence request saved under the requesting owner on a copy.
        """
        needs_pdf = config.wants_pdf and cached.outputs.pdf is None
        if not needs_pdf and not config.persist:
            return cached
        if config.persist:
            validate_config(config, kind, transit_max_days=self._settings.transit_max_days)

        warnings = list(cached.metadata.warnings)
        pdf = cached.outputs.pdf
        if needs_pdf:
            pdf = await self._render_pdf(
                cached.outputs.html, cached.id, cached.content.title, config, warnings,
            )
        report = cached.model_copy(update={
            "outputs": cached.outputs.model_copy(update={"pdf": pdf}),
            "metadata": cached.metadata.model_copy(
                update={"config": config, "warnings": warnings},
            ),
        })
        if config.persist:
            await self._persist(report)
        return report

    async def _render_pdf(
        self,
        html: str,
        fingerprint: str,
        title: str,
        config: GenerationConfig,
        warnings: list[str],
    ) -> str | None:
        if not config.wants_pdf:
            return None
        if self._pdf_renderer is None:
            warnings.append("PDF requested but no renderer is configured; HTML only")
            logger.warning("PDF requested for %s without a renderer", fingerprint)
            return None
        try:
            return await self._pdf_renderer.render(
                html, PdfOptions(filename=fingerprint, title=title, theme=config.theme),
            )
        except Exception as exc:
            error = exc if isinstance(exc, PdfRenderError) else PdfRenderError(
                f"{type(exc).__name__}: {exc}",
                stage=ProgressStage.FORMATTING.value,
                details={"renderer": type(self._pdf_renderer).__name__},
            )
            warnings.append(f"PDF rendering failed: {error.message}")
            logger.warning("PDF rendering failed for %s: %s", fingerprint, error)
            return None

    async def _persist(self, report: GeneratedReport) -> None:
        warnings = report.metadata.warnings
        owner_id = report.owner_id
        if not owner_id:
            raise ValidationError(
                "Persisting a report requires an owner id",
                stage=ProgressStage.VALIDATION.value,
            )
        if self._store is None:
            warnings.append("Persistence requested but no store is configured")
            logger.warning("No persistence store for report %s", report.id)
            return
        try:
            await self._store.save(report.id, ReportRecord.from_report(report, owner_id))
        except Exception as exc:
            error = exc if isinstance(exc, PersistenceError) else PersistenceError(
                f"{type(exc).__name__}: {exc}",
                stage=ProgressStage.FINALIZING.value,
                details={"store": type(self._store).__name__, "report_id": report.id},
            )
            warnings.append(f"Report was not persisted: {error.message}")
            logger.warning("Persisting report %s failed: %s", report.id, error)

    @staticmethod
    def _fail(tracker: ProgressTracker, error: ReportError) -> None:
        if tracker.is_terminal:
            return
        tracker.fail(error)
        logger.error(
            "Generation %s failed at %s: %s",
            tracker.generation_id, error.stage, error.message,
        )
