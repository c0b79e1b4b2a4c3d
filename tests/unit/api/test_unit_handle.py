# tests/unit/api/test_unit_handle.py - v1
"""Tests for api/handle.py - GenerationHandle."""

from __future__ import annotations

import asyncio

import pytest

from astroreport.api.handle import GenerationHandle
from astroreport.tracking.progress import ProgressTracker


async def _wait_forever() -> None:
    await asyncio.Event().wait()


class TestGenerationHandle:
    @pytest.mark.asyncio
    async def test_await_returns_result(self):
        async def produce():
            return "report"

        handle = GenerationHandle("g1", ProgressTracker("g1"), asyncio.create_task(produce()))
        assert await handle == "report"
        assert handle.done()
        assert handle.cancel() is False

    @pytest.mark.asyncio
    async def test_cooperative_cancel(self):
        tracker = ProgressTracker("g1")
        task = asyncio.create_task(_wait_forever())
        handle = GenerationHandle("g1", tracker, task)

        assert handle.cancel("stop") is True
        assert tracker.cancel_requested
        assert not task.cancelled()
        task.cancel()

    @pytest.mark.asyncio
    async def test_force_cancel(self):
        task = asyncio.create_task(_wait_forever())
        handle = GenerationHandle("g1", ProgressTracker("g1"), task)

        assert handle.cancel(force=True) is True
        with pytest.raises(asyncio.CancelledError):
            await handle.result()

    @pytest.mark.asyncio
    async def test_state_and_repr(self):
        tracker = ProgressTracker("g1")
        task = asyncio.create_task(_wait_forever())
        handle = GenerationHandle("g1", tracker, task)
        assert handle.state.stage.value == "pending"
        assert repr(handle) == "GenerationHandle('g1', stage=pending)"
        task.cancel()
