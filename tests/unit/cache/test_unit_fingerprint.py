# tests/unit/cache/test_unit_fingerprint.py - v1
"""Tests for cache/fingerprint.py - deterministic request fingerprints."""

from __future__ import annotations

import datetime as dt

import pytest

from astroreport.cache.fingerprint import FINGERPRINT_HEX_LENGTH, compute_fingerprint
from astroreport.core.models import GenerationConfig, ReportKind, SubjectPair


class TestComputeFingerprint:
    def test_deterministic(self, sample_subject, default_config):
        a = compute_fingerprint(sample_subject, ReportKind.WESTERN, default_config)
        b = compute_fingerprint(sample_subject, ReportKind.WESTERN, GenerationConfig())
        assert a == b

    def test_format(self, sample_subject, default_config):
        fp = compute_fingerprint(sample_subject, ReportKind.WESTERN, default_config)
        assert len(fp) == FINGERPRINT_HEX_LENGTH
        assert all(c in "0123456789abcdef" for c in fp)

    def test_kind_changes_fingerprint(self, sample_subject, default_config):
        assert compute_fingerprint(sample_subject, ReportKind.WESTERN, default_config) != \
            compute_fingerprint(sample_subject, ReportKind.VEDIC, default_config)

    def test_kind_accepts_string(self, sample_subject, default_config):
        assert compute_fingerprint(sample_subject, "western", default_config) == \
            compute_fingerprint(sample_subject, ReportKind.WESTERN, default_config)

    def test_subject_changes_fingerprint(self, sample_subject, default_config):
        moved = sample_subject.model_copy(update={"time": dt.time(14, 31)})
        assert compute_fingerprint(sample_subject, ReportKind.WESTERN, default_config) != \
            compute_fingerprint(moved, ReportKind.WESTERN, default_config)

    @pytest.mark.parametrize("update", [
        {"detail_level": "basic"},
        {"include_charts": False},
        {"theme": "mystical"},
        {"sections": ("planets",)},
    ])
    def test_content_fields_change_fingerprint(self, sample_subject, update):
        base = compute_fingerprint(sample_subject, ReportKind.WESTERN, GenerationConfig())
        assert compute_fingerprint(sample_subject, ReportKind.WESTERN, GenerationConfig(**update)) != base

    @pytest.mark.parametrize("update", [
        {"persist": True, "owner_id": "u1"},
        {"include_pdf": True},
        {"target_format": "both"},
        {"force_regenerate": True},
    ])
    def test_delivery_fields_ignored(self, sample_subject, update):
        base = compute_fingerprint(sample_subject, ReportKind.WESTERN, GenerationConfig())
        assert compute_fingerprint(sample_subject, ReportKind.WESTERN, GenerationConfig(**update)) == base

    def test_transit_window_only_counts_for_transit(self, sample_subject):
        short = GenerationConfig(transit_start=dt.date(2026, 1, 1), transit_days=7)
        long = GenerationConfig(transit_start=dt.date(2026, 1, 1), transit_days=30)
        assert compute_fingerprint(sample_subject, ReportKind.WESTERN, short) == \
            compute_fingerprint(sample_subject, ReportKind.WESTERN, long)
        assert compute_fingerprint(sample_subject, ReportKind.TRANSIT, short) != \
            compute_fingerprint(sample_subject, ReportKind.TRANSIT, long)

    def test_pair_order_matters(self, sample_subject, partner_subject, default_config):
        ab = SubjectPair(primary=sample_subject, partner=partner_subject)
        ba = SubjectPair(primary=partner_subject, partner=sample_subject)
        assert compute_fingerprint(ab, ReportKind.COMPATIBILITY, default_config) != \
            compute_fingerprint(ba, ReportKind.COMPATIBILITY, default_config)
