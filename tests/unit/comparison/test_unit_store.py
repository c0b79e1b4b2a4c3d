# tests/unit/comparison/test_unit_store.py - v1
"""Tests for comparison/store.py - saved comparisons."""

from __future__ import annotations

import pytest

from astroreport.comparison.models import ComparisonSettings
from astroreport.comparison.store import ComparisonStore
from astroreport.core.errors import InsufficientInputError


@pytest.fixture
def store() -> ComparisonStore:
    return ComparisonStore()


class TestComparisonStore:
    def test_create_and_get(self, store, make_report):
        comparison = store.create("Mine", [make_report("a"), make_report("b")], owner_id="u1")
        assert comparison.report_ids == ["a", "b"]
        assert store.get(comparison.id) == comparison
        assert len(store) == 1

    def test_create_needs_two_reports(self, store, make_report):
        with pytest.raises(InsufficientInputError):
            store.create("Mine", [make_report("a")])
        assert len(store) == 0

    def test_list_by_owner(self, store, make_report):
        reports = [make_report("a"), make_report("b")]
        first = store.create("one", reports, owner_id="u1")
        store.create("two", reports, owner_id="u2")
        third = store.create("three", reports, owner_id="u1")
        assert [c.id for c in store.list("u1")] == [first.id, third.id]
        assert len(store.list()) == 3

    def test_update(self, store, make_report):
        comparison = store.create("Mine", [make_report("a"), make_report("b")])
        updated = store.update(
            comparison.id,
            name="Renamed",
            comparison_type="tabbed",
            settings=ComparisonSettings(color_scheme="colorblind-friendly"),
        )
        assert updated.name == "Renamed"
        assert updated.comparison_type == "tabbed"
        assert updated.settings.color_scheme == "colorblind-friendly"
        assert updated.updated_at >= comparison.updated_at
        assert updated.created_at == comparison.created_at
        assert store.get(comparison.id) == updated

    def test_update_rejects_immutable_fields(self, store, make_report):
        comparison = store.create("Mine", [make_report("a"), make_report("b")])
        with pytest.raises(ValueError, match="owner_id"):
            store.update(comparison.id, owner_id="someone")

    def test_update_report_ids_needs_two(self, store, make_report):
        comparison = store.create("Mine", [make_report("a"), make_report("b")])
        with pytest.raises(InsufficientInputError):
            store.update(comparison.id, report_ids=["a"])

    def test_update_unknown(self, store):
        assert store.update("missing", name="x") is None

    def test_delete(self, store, make_report):
        comparison = store.create("Mine", [make_report("a"), make_report("b")])
        assert store.delete(comparison.id) is True
        assert store.delete(comparison.id) is False
        assert store.get(comparison.id) is None
