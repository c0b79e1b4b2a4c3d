# tests/unit/logging/test_unit_context.py - v2
"""Tests for logging/context.py - contextual logging variables."""

from __future__ import annotations

import asyncio

import pytest

from astroreport.logging.context import (
    clear_context,
    get_context,
    set_batch_context,
    set_generation_context,
    set_stage_context,
)


class TestLogContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_initial_state(self):
        ctx = get_context()
        assert ctx.generation_id is None
        assert ctx.batch_id is None
        assert ctx.stage is None

    def test_set_generation_context(self):
        set_generation_context("gen1", "western")
        ctx = get_context()
        assert ctx.generation_id == "gen1"
        assert ctx.kind == "western"

    def test_set_stage_and_batch(self):
        set_batch_context("b1")
        set_stage_context("analysis")
        ctx = get_context()
        assert ctx.batch_id == "b1"
        assert ctx.stage == "analysis"

    def test_as_dict_filters_none(self):
        set_generation_context("gen1")
        d = get_context().as_dict()
        assert d == {"generation_id": "gen1"}

    def test_clear(self):
        set_generation_context("gen1", "vedic")
        set_stage_context("validation")
        clear_context()
        ctx = get_context()
        assert ctx.generation_id is None
        assert ctx.stage is None

    @pytest.mark.asyncio
    async def test_tasks_do_not_leak_context(self):
        async def worker(gid: str) -> str | None:
            set_generation_context(gid)
            await asyncio.sleep(0)
            return get_context().generation_id

        results = await asyncio.gather(worker("a"), worker("b"))
        assert results == ["a", "b"]
        assert get_context().generation_id is None
