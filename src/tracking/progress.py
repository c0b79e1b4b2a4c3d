# src/tracking/progress.py - v2
"""Per-generation progress state machine with non-blocking observer delivery.

Transitions run pending -> validation -> calculations -> analysis ->
formatting -> finalizing -> complete, and any non-terminal stage may move to
error. Each accepted transition is queued for the observer and delivered by
a dispatcher task, so a slow observer never suspends the pipeline. When the
bounded queue is full, the oldest intermediate state is dropped; complete
and error are never dropped.

The tracker also carries the cooperative cancellation flag checked by the
pipeline at stage boundaries.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import deque
from typing import Awaitable, Callable, Union

from astroreport.core.errors import GenerationCancelledError, ReportError
from astroreport.tracking.models import (
    STAGE_ORDER,
    STAGE_PERCENT,
    TERMINAL_STAGES,
    ProgressStage,
    ProgressState,
)

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[ProgressState], Union[None, Awaitable[None]]]

DEFAULT_QUEUE_SIZE = 32


class ProgressTransitionError(RuntimeError):
    """A stage transition violated the forward-only order."""


class ProgressTracker:
    """Stage machine and delivery queue for one generation.

    Args:
        generation_id: Id stamped on every published state.
        observer: Sync callable or coroutine function receiving states.
        queue_size: Max undelivered states held for the observer.
    """

    def __init__(
        self,
        generation_id: str,
        observer: ProgressObserver | None = None,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        if queue_size < 2:
            raise ValueError("queue_size must be >= 2")
        self.generation_id = generation_id
        self._observer = observer
        self._queue_size = queue_size
        self._queue: deque[ProgressState] = deque()
        self._dispatcher: asyncio.Task[None] | None = None
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._state = ProgressState(
            generation_id=generation_id,
            stage=ProgressStage.PENDING,
            percentage=0.0,
        )
        self._published = False
        self._cancel_requested = False
        self._cancel_reason: str | None = None
        self.history: list[ProgressState] = []
        self.dropped = 0

    # --- State ---

    @property
    def state(self) -> ProgressState:
        return self._state

    @property
    def stage(self) -> ProgressStage:
        return self._state.stage

    @property
    def is_terminal(self) -> bool:
        return self._state.stage in TERMINAL_STAGES

    def start(self, message: str | None = None) -> ProgressState:
        """Publish the initial pending state."""
        if self._published:
            raise ProgressTransitionError(
                f"Generation {self.generation_id} already started"
            )
        return self._publish(ProgressStage.PENDING, message)

    def advance(self, stage: ProgressStage, message: str | None = None) -> ProgressState:
        """Move forward to ``stage``. Backward or repeated moves are rejected."""
        stage = ProgressStage(stage)
        if stage is ProgressStage.ERROR:
            raise ProgressTransitionError("Use fail() to enter the error stage")
        if self.is_terminal:
            raise ProgressTransitionError(
                f"Generation {self.generation_id} already ended at {self.stage.value}"
            )
        current = STAGE_ORDER.index(self.stage)
        target = STAGE_ORDER.index(stage)
        if target < current or (target == current and self._published):
            raise ProgressTransitionError(
                f"Cannot move from {self.stage.value} to {stage.value}"
            )
        return self._publish(stage, message)

    def complete(self, message: str | None = None) -> ProgressState:
        return self.advance(ProgressStage.COMPLETE, message)

    def fail(self, error: ReportError) -> ProgressState:
        """Publish the terminal error state carrying ``error``."""
        if self.is_terminal:
            raise ProgressTransitionError(
                f"Generation {self.generation_id} already ended at {self.stage.value}"
            )
        return self._publish(ProgressStage.ERROR, error.message, error=error)

    # --- Cancellation ---

    def request_cancel(self, reason: str = "Cancelled by caller") -> bool:
        """Flag the generation for cancellation at the next stage boundary.

        Returns False when the generation already ended.
        """
        if self.is_terminal:
            return False
        self._cancel_requested = True
        self._cancel_reason = reason
        return True

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    @property
    def cancel_reason(self) -> str | None:
        return self._cancel_reason

    def raise_if_cancelled(self) -> None:
        if self._cancel_requested:
            raise GenerationCancelledError(
                self._cancel_reason or "Cancelled by caller",
                stage=self.stage.value,
            )

    # --- Delivery ---

    async def drain(self) -> None:
        """Wait until every state published so far reached the observer."""
        if self._dispatcher is None or self._dispatcher.done():
            return
        await self._idle.wait()

    def _publish(
        self,
        stage: ProgressStage,
        message: str | None,
        error: ReportError | None = None,
    ) -> ProgressState:
        state = ProgressState(
            generation_id=self.generation_id,
            stage=stage,
            percentage=STAGE_PERCENT[stage],
            message=message,
            error=error.to_info() if error is not None else None,
        )
        self._state = state
        self._published = True
        self.history.append(state)
        logger.debug(
            "Generation %s -> %s (%.0f%%)", self.generation_id, stage.value, state.percentage
        )
        if self._observer is not None:
            self._enqueue(self._observer, state)
        return state

    def _enqueue(self, observer: ProgressObserver, state: ProgressState) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: synchronous callers get synchronous delivery.
            self._deliver_sync(observer, state)
            return

        if len(self._queue) >= self._queue_size:
            self._drop_oldest_intermediate()
        self._queue.append(state)

        if self._dispatcher is None:
            self._dispatcher = asyncio.create_task(
                self._dispatch(observer), name=f"progress-{self.generation_id}"
            )
        self._idle.clear()
        self._wakeup.set()

    def _drop_oldest_intermediate(self) -> None:
        for index, queued in enumerate(self._queue):
            if queued.stage not in TERMINAL_STAGES:
                del self._queue[index]
                self.dropped += 1
                logger.debug(
                    "Progress queue full for %s, dropped %s",
                    self.generation_id, queued.stage.value,
                )
                return

    async def _dispatch(self, observer: ProgressObserver) -> None:
        while True:
            while self._queue:
                await self._deliver(observer, self._queue.popleft())
            self._idle.set()
            if self.is_terminal:
                return
            self._wakeup.clear()
            await self._wakeup.wait()

    async def _deliver(self, observer: ProgressObserver, state: ProgressState) -> None:
        try:
            result = observer(state)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.warning(
                "Progress observer failed for %s at %s",
                self.generation_id, state.stage.value, exc_info=True,
            )

    def _deliver_sync(self, observer: ProgressObserver, state: ProgressState) -> None:
        try:
            result = observer(state)
            if inspect.isawaitable(result):
                # Nothing can await it outside a loop.
                close = getattr(result, "close", None)
                if close is not None:
                    close()
                logger.warning(
                    "Async progress observer for %s called outside an event loop",
                    self.generation_id,
                )
        except Exception:
            logger.warning(
                "Progress observer failed for %s at %s",
                self.generation_id, state.stage.value, exc_info=True,
            )
