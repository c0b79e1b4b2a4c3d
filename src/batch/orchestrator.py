# src/batch/orchestrator.py - v2
"""Bounded-concurrency batch generation with per-item failure isolation.

Each request runs through the full GenerationPipeline (sharing its cache)
under an asyncio.Semaphore. A failing item never affects its siblings: its
error is reported at its original index. Overall progress handed to
``on_progress`` is the arithmetic mean of the item percentages.

Item trackers are announced through ``on_item_start`` as soon as the item is
queued, so a caller can cancel a single item by generation id; a retry
gets a fresh tracker that inherits a pending cancellation.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Sequence

from astroreport.batch.models import BatchItemResult, BatchRequest, BatchResult
from astroreport.batch.retry import RetryPolicy, with_retry
from astroreport.config.settings import Settings
from astroreport.core.errors import GenerationTimeoutError, ReportError
from astroreport.core.models import GeneratedReport
from astroreport.logging.context import set_batch_context
from astroreport.pipeline.generation_pipeline import GenerationPipeline
from astroreport.tracking.models import ProgressStage, ProgressState
from astroreport.tracking.progress import ProgressTracker

logger = logging.getLogger(__name__)

BatchProgressCallback = Callable[[float, list[ProgressState]], "Awaitable[None] | None"]
ItemStartHook = Callable[[str, ProgressTracker], None]
ItemFinishHook = Callable[[str], None]


class _BatchProgress:
    """Latest state of every item plus the aggregate percentage."""

    def __init__(
        self,
        batch_id: str,
        count: int,
        on_progress: BatchProgressCallback | None,
    ) -> None:
        self._on_progress = on_progress
        self.states = [
            ProgressState(
                generation_id=f"{batch_id}-{index}",
                stage=ProgressStage.PENDING,
                percentage=0.0,
            )
            for index in range(count)
        ]

    @property
    def overall(self) -> float:
        if not self.states:
            return 0.0
        return sum(s.percentage for s in self.states) / len(self.states)

    def observer(self, index: int) -> Callable[[ProgressState], Awaitable[None]]:
        async def observe(state: ProgressState) -> None:
            await self.update(index, state)
        return observe

    async def update(self, index: int, state: ProgressState) -> None:
        self.states[index] = state
        if self._on_progress is None:
            return
        result: Any = self._on_progress(self.overall, list(self.states))
        if inspect.isawaitable(result):
            await result


class BatchOrchestrator:
    """Runs many generations concurrently through one pipeline.

    Args:
        pipeline: Shared generation pipeline (and therefore shared cache).
        settings: Concurrency, timeout, retry and queue size limits.
        on_item_start: Called with (generation_id, tracker) when an item is
            queued and again for every retry attempt.
        on_item_finish: Called with the generation id once the item ended.
    """

    def __init__(
        self,
        pipeline: GenerationPipeline,
        settings: Settings | None = None,
        on_item_start: ItemStartHook | None = None,
        on_item_finish: ItemFinishHook | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._settings = settings or Settings()
        self._on_item_start = on_item_start
        self._on_item_finish = on_item_finish
        self._retry = RetryPolicy(
            max_retries=self._settings.batch_retry_attempts,
            base_delay_s=self._settings.batch_retry_base_delay_seconds,
        )

    async def generate_batch(
        self,
        requests: Sequence[BatchRequest],
        on_progress: BatchProgressCallback | None = None,
        batch_id: str | None = None,
    ) -> BatchResult:
        """Generate every request, isolating failures per item.

        Args:
            requests: Requests in caller order.
            on_progress: Receives (overall_percentage, item_states).
            batch_id: Prefix of the item generation ids.

        Returns:
            BatchResult with one item per request, in request order.
        """
        batch_id = batch_id or uuid.uuid4().hex[:12]
        set_batch_context(batch_id)
        started = time.monotonic()
        progress = _BatchProgress(batch_id, len(requests), on_progress)
        semaphore = asyncio.Semaphore(self._settings.batch_max_concurrency)

        logger.info(
            "Starting batch %s: %d item(s), concurrency %d",
            batch_id, len(requests), self._settings.batch_max_concurrency,
        )
        items = await asyncio.gather(*(
            self._run_item(index, request, batch_id, semaphore, progress)
            for index, request in enumerate(requests)
        ))

        result = BatchResult(
            batch_id=batch_id,
            items=list(items),
            duration_seconds=round(time.monotonic() - started, 3),
        )
        logger.info("Batch %s finished: %s", batch_id, result.summary)
        return result

    async def _run_item(
        self,
        index: int,
        request: BatchRequest,
        batch_id: str,
        semaphore: asyncio.Semaphore,
        progress: _BatchProgress,
    ) -> BatchItemResult:
        generation_id = f"{batch_id}-{index}"
        timeout = self._settings.batch_item_timeout_seconds
        attempts = 0
        tracker = self._new_tracker(generation_id, index, progress, previous=None)

        async def attempt() -> GeneratedReport:
            nonlocal attempts, tracker
            if attempts:
                tracker = self._new_tracker(generation_id, index, progress, previous=tracker)
            attempts += 1
            try:
                return await asyncio.wait_for(
                    self._pipeline.run(request.subject, request.kind, request.config, tracker),
                    timeout=timeout,
                )
            finally:
                await tracker.drain()

        try:
            async with semaphore:
                started = time.monotonic()
                try:
                    report = await with_retry(attempt, policy=self._retry, label=generation_id)
                except asyncio.TimeoutError:
                    stage = tracker.state.error.stage if tracker.state.error is not None else None
                    error = GenerationTimeoutError(
                        f"Item {index} exceeded {timeout:g}s",
                        stage=stage,
                        details={"index": index, "timeout_seconds": timeout},
                    )
                    logger.warning("Batch item %s timed out at %s", generation_id, stage)
                    await progress.update(index, ProgressState(
                        generation_id=generation_id,
                        stage=ProgressStage.ERROR,
                        percentage=0.0,
                        message=error.message,
                        error=error.to_info(),
                    ))
                    return self._failure(index, generation_id, error, attempts, started)
                except ReportError as exc:
                    logger.warning("Batch item %s failed: %s", generation_id, exc)
                    return self._failure(index, generation_id, exc, attempts, started)
        finally:
            if self._on_item_finish is not None:
                self._on_item_finish(generation_id)

        return BatchItemResult(
            index=index,
            generation_id=generation_id,
            status="success",
            report=report,
            attempts=attempts,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

    def _new_tracker(
        self,
        generation_id: str,
        index: int,
        progress: _BatchProgress,
        previous: ProgressTracker | None,
    ) -> ProgressTracker:
        tracker = ProgressTracker(
            generation_id,
            observer=progress.observer(index),
            queue_size=self._settings.progress_queue_size,
        )
        if previous is not None and previous.cancel_requested:
            tracker.request_cancel(previous.cancel_reason or "Cancelled by caller")
        if self._on_item_start is not None:
            self._on_item_start(generation_id, tracker)
        return tracker

    @staticmethod
    def _failure(
        index: int,
        generation_id: str,
        error: ReportError,
        attempts: int,
        started: float,
    ) -> BatchItemResult:
        return BatchItemResult(
            index=index,
            generation_id=generation_id,
            status="error",
            error=error.to_info(),
            attempts=attempts,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
