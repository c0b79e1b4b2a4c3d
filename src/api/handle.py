# src/api/handle.py - v1
"""Handle on one running generation."""

from __future__ import annotations

import asyncio
from typing import Any, Generator

from astroreport.core.models import GeneratedReport
from astroreport.tracking.models import ProgressState
from astroreport.tracking.progress import ProgressTracker


class GenerationHandle:
    """Result future, progress state and cancellation for a generation.

    Awaiting the handle returns the GeneratedReport or raises the
    generation's ReportError.
    """

    def __init__(
        self,
        generation_id: str,
        tracker: ProgressTracker,
        task: asyncio.Task[GeneratedReport],
    ) -> None:
        self.generation_id = generation_id
        self.tracker = tracker
        self._task = task

    @property
    def state(self) -> ProgressState:
        return self.tracker.state

    def done(self) -> bool:
        return self._task.done()

    def cancel(self, reason: str = "Cancelled by caller", force: bool = False) -> bool:
        """Request cancellation.

        The pipeline stops at its next stage boundary. With ``force`` the
        task itself is cancelled as well. Returns False if already finished.
        """
        if self._task.done():
            return False
        requested = self.tracker.request_cancel(reason)
        if force:
            self._task.cancel(reason)
        return requested or force

    async def result(self) -> GeneratedReport:
        return await self._task

    def __await__(self) -> Generator[Any, None, GeneratedReport]:
        return self._task.__await__()

    def __repr__(self) -> str:
        return f"GenerationHandle({self.generation_id!r}, stage={self.tracker.stage.value})"
