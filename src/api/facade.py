# src/api/facade.py - v3
"""Public API facade: single entry point for report generation and comparison.

Usage:
    from astroreport.api.facade import create_service

    async with create_service() as service:
        report = await service.generate(subject, ReportKind.WESTERN)
        other = await service.generate(subject, ReportKind.VEDIC)
        result = service.compare([report, other])
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING, Sequence, Union

from astroreport.api.handle import GenerationHandle
from astroreport.batch.models import BatchRequest, BatchResult
from astroreport.batch.orchestrator import BatchOrchestrator, BatchProgressCallback
from astroreport.cache.report_cache import Clock, ReportCache
from astroreport.comparison.engine import ComparisonEngine
from astroreport.comparison.exporter import ExportFormat, export_comparison
from astroreport.comparison.models import (
    ComparisonResult,
    ComparisonSettings,
    ExportArtifact,
    ReportComparison,
)
from astroreport.comparison.store import ComparisonStore
from astroreport.config.settings import Settings
from astroreport.core.errors import DuplicateGenerationError, PersistenceError
from astroreport.core.models import (
    BirthSubject,
    GeneratedReport,
    GenerationConfig,
    ReportKind,
    Subject,
    SubjectPair,
)
from astroreport.ephemeris.deterministic import DeterministicEphemeris
from astroreport.pipeline.generation_pipeline import GenerationPipeline
from astroreport.tracking.progress import ProgressObserver, ProgressTracker

if TYPE_CHECKING:
    from astroreport.ephemeris.base_calculator import BaseEphemerisCalculator
    from astroreport.rendering.base_pdf_renderer import BasePdfRenderer
    from astroreport.storage.base_report_store import BaseReportStore

logger = logging.getLogger(__name__)

BatchItem = Union[BatchRequest, tuple]


class ReportService:
    """Caller-facing service wiring cache, pipeline, batch and comparison.

    Args:
        settings: Global settings. Loaded from .env if None.
        calculator: Ephemeris calculator. DeterministicEphemeris if None.
        cache: Shared report cache. Built from settings if None.
        store: Persistence store. None disables persistence.
        pdf_renderer: PDF renderer. None degrades PDF requests to HTML.
        clock: Current-time source shared by cache and pipeline.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        calculator: BaseEphemerisCalculator | None = None,
        cache: ReportCache | None = None,
        store: BaseReportStore | None = None,
        pdf_renderer: BasePdfRenderer | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._cache = cache or ReportCache(
            validity=timedelta(seconds=self._settings.cache_validity_seconds),
            clock=clock,
            max_entries=self._settings.cache_max_entries,
        )
        self._store = store
        self._pipeline = GenerationPipeline(
            calculator=calculator or DeterministicEphemeris(),
            cache=self._cache,
            pdf_renderer=pdf_renderer,
            store=store,
            settings=self._settings,
            clock=clock,
        )
        self._batch = BatchOrchestrator(
            self._pipeline,
            self._settings,
            on_item_start=self._register_batch_item,
            on_item_finish=self._release,
        )
        self._engine = ComparisonEngine()
        self._comparisons = ComparisonStore()
        self._active: dict[str, GenerationHandle] = {}
        self._sweeper: asyncio.Task[None] | None = None
        self._sweeper_stop: asyncio.Event | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def cache(self) -> ReportCache:
        return self._cache

    @property
    def comparisons(self) -> ComparisonStore:
        return self._comparisons

    # --- Generation ---

    def start_generation(
        self,
        subject: Subject,
        kind: ReportKind,
        config: GenerationConfig | None = None,
        on_progress: ProgressObserver | None = None,
        generation_id: str | None = None,
    ) -> GenerationHandle:
        """Schedule a generation on the running loop and return its handle.

        Raises:
            DuplicateGenerationError: ``generation_id`` is already running.
        """
        generation_id = generation_id or uuid.uuid4().hex
        if generation_id in self._active:
            raise DuplicateGenerationError(
                f"Generation {generation_id} is already running",
                details={"generation_id": generation_id},
            )
        tracker = ProgressTracker(
            generation_id,
            observer=on_progress,
            queue_size=self._settings.progress_queue_size,
        )
        task = asyncio.create_task(
            self._run(subject, ReportKind(kind), config or GenerationConfig(), tracker),
            name=f"generation-{generation_id}",
        )
        handle = GenerationHandle(generation_id, tracker, task)
        self._active[generation_id] = handle
        task.add_done_callback(lambda _: self._release(generation_id))
        return handle

    async def generate(
        self,
        subject: Subject,
        kind: ReportKind,
        config: GenerationConfig | None = None,
        on_progress: ProgressObserver | None = None,
        generation_id: str | None = None,
    ) -> GeneratedReport:
        """Generate one report (or return it from cache)."""
        handle = self.start_generation(subject, kind, config, on_progress, generation_id)
        return await handle

    async def generate_compatibility(
        self,
        primary: BirthSubject,
        partner: BirthSubject,
        config: GenerationConfig | None = None,
        on_progress: ProgressObserver | None = None,
    ) -> GeneratedReport:
        return await self.generate(
            SubjectPair(primary=primary, partner=partner),
            ReportKind.COMPATIBILITY,
            config,
            on_progress,
        )

    async def generate_transit(
        self,
        subject: BirthSubject,
        start: dt.date | None = None,
        days: int = 30,
        config: GenerationConfig | None = None,
        on_progress: ProgressObserver | None = None,
    ) -> GeneratedReport:
        """Transit report for ``days`` days from ``start`` (today if None)."""
        config = (config or GenerationConfig()).model_copy(
            update={"transit_start": start, "transit_days": days},
        )
        return await self.generate(subject, ReportKind.TRANSIT, config, on_progress)

    async def generate_batch(
        self,
        requests: Sequence[BatchItem],
        on_progress: BatchProgressCallback | None = None,
    ) -> BatchResult:
        """Generate many reports with bounded concurrency.

        Items are BatchRequest objects or (subject, kind[, config]) tuples.
        """
        return await self._batch.generate_batch(
            [_as_batch_request(item) for item in requests], on_progress,
        )

    def cancel(self, generation_id: str, reason: str = "Cancelled by caller") -> bool:
        """Cancel a running generation. Returns False if it is not running."""
        handle = self._active.get(generation_id)
        if handle is None:
            return False
        logger.info("Cancelling generation %s: %s", generation_id, reason)
        return handle.cancel(reason)

    def active_generations(self) -> list[str]:
        return list(self._active)

    def _register_batch_item(self, generation_id: str, tracker: ProgressTracker) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._active[generation_id] = GenerationHandle(generation_id, tracker, task)

    def _release(self, generation_id: str) -> None:
        self._active.pop(generation_id, None)

    async def _run(
        self,
        subject: Subject,
        kind: ReportKind,
        config: GenerationConfig,
        tracker: ProgressTracker,
    ) -> GeneratedReport:
        try:
            return await self._pipeline.run(subject, kind, config, tracker)
        finally:
            await tracker.drain()

    # --- Comparison ---

    def compare(
        self,
        reports: Sequence[GeneratedReport],
        settings: ComparisonSettings | None = None,
    ) -> ComparisonResult:
        return self._engine.compare(reports, settings)

    def create_comparison(
        self,
        name: str,
        reports: Sequence[GeneratedReport],
        settings: ComparisonSettings | None = None,
        owner_id: str | None = None,
    ) -> ReportComparison:
        return self._comparisons.create(name, reports, settings, owner_id)

    def export_comparison(
        self,
        comparison: ReportComparison,
        result: ComparisonResult,
        fmt: ExportFormat = "json",
    ) -> ExportArtifact:
        return export_comparison(comparison, result, fmt)

    # --- Persistence & cache ---

    async def get_user_reports(self, owner_id: str) -> list[GeneratedReport]:
        """Persisted reports of ``owner_id``, newest first."""
        records = await self._require_store().load_by_owner(owner_id)
        return [record.report for record in records]

    async def delete_report(self, report_id: str, owner_id: str) -> bool:
        """Delete a persisted report and drop it from the cache."""
        deleted = await self._require_store().delete(report_id, owner_id)
        if deleted:
            self._cache.invalidate(report_id)
            logger.info("Deleted report %s of owner %s", report_id, owner_id)
        return deleted

    def get_cached_report(self, report_id: str) -> GeneratedReport | None:
        return self._cache.get(report_id)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _require_store(self) -> BaseReportStore:
        if self._store is None:
            raise PersistenceError("No persistence store is configured")
        return self._store

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start the background cache sweeper if an interval is configured."""
        interval = self._settings.cache_sweep_interval_seconds
        if interval <= 0 or self._sweeper is not None:
            return
        self._sweeper_stop = asyncio.Event()
        self._sweeper = asyncio.create_task(
            self._cache.run_sweeper(interval, self._sweeper_stop), name="cache-sweeper",
        )

    async def close(self) -> None:
        """Cancel running generations and stop the sweeper."""
        pending = list(self._active.values())
        for handle in pending:
            handle.cancel("Service is shutting down")
        if pending:
            await asyncio.gather(*(h.result() for h in pending), return_exceptions=True)
        if self._sweeper is not None and self._sweeper_stop is not None:
            self._sweeper_stop.set()
            await self._sweeper
            self._sweeper = None
            self._sweeper_stop = None

    async def __aenter__(self) -> ReportService:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def _as_batch_request(item: BatchItem) -> BatchRequest:
    if isinstance(item, BatchRequest):
        return item
    subject, kind, *rest = item
    config = rest[0] if rest else GenerationConfig()
    return BatchRequest(subject=subject, kind=kind, config=config)


def create_service(settings: Settings | None = None, **overrides: object) -> ReportService:
    """Build a ReportService with the store and PDF renderer from settings."""
    from astroreport.rendering.renderer_factory import create_pdf_renderer
    from astroreport.storage.store_factory import create_report_store

    settings = settings or Settings()
    overrides.setdefault("store", create_report_store(settings))
    overrides.setdefault("pdf_renderer", create_pdf_renderer(settings))
    return ReportService(settings=settings, **overrides)  # type: ignore[arg-type]
