# src/cache/fingerprint.py - v3
"""Deterministic fingerprints for generation requests.

A fingerprint is the SHA-256 of a canonical JSON document built from an
explicit, reviewable field list: the report kind, every subject field and
the content-affecting subset of GenerationConfig. Delivery options (persist,
include_pdf, target_format, force_regenerate, owner_id) never participate,
so toggling them does not miss the cache.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from astroreport.core.models import (
    BirthSubject,
    GenerationConfig,
    ReportKind,
    Subject,
    SubjectPair,
)

# Bump when the hashed document layout changes.
FINGERPRINT_VERSION = "fp1"

# 128 bits of the SHA-256 digest.
FINGERPRINT_HEX_LENGTH = 32

CONTENT_CONFIG_FIELDS: tuple[str, ...] = (
    "detail_level",
    "include_charts",
    "theme",
    "sections",
)

TRANSIT_CONFIG_FIELDS: tuple[str, ...] = ("transit_start", "transit_days")


def compute_fingerprint(
    subject: Subject,
    kind: ReportKind,
    config: GenerationConfig,
) -> str:
    """Compute the fingerprint of a generation request.

    Args:
        subject: BirthSubject, or SubjectPair for compatibility reports.
        kind: Report kind.
        config: Generation config; only content-affecting fields are hashed.

    Returns:
        Fixed-length lowercase hex string.
    """
    document = {
        "v": FINGERPRINT_VERSION,
        "kind": ReportKind(kind).value,
        "subject": _subject_fields(subject),
        "config": _config_fields(config, ReportKind(kind)),
    }
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_HEX_LENGTH]


def _subject_fields(subject: Subject) -> dict[str, Any]:
    if isinstance(subject, SubjectPair):
        return {
            "primary": _birth_fields(subject.primary),
            "partner": _birth_fields(subject.partner),
        }
    return _birth_fields(subject)


def _birth_fields(subject: BirthSubject) -> dict[str, Any]:
    location = subject.location
    return {
        "date": subject.date.isoformat() if subject.date else None,
        "time": subject.time.isoformat() if subject.time else None,
        "name": subject.name,
        "location": None if location is None else {
            "name": location.name,
            "latitude": location.latitude,
            "longitude": location.longitude,
            "timezone": location.timezone,
        },
    }


def _config_fields(config: GenerationConfig, kind: ReportKind) -> dict[str, Any]:
    fields = CONTENT_CONFIG_FIELDS
    if kind is ReportKind.TRANSIT:
        fields = fields + TRANSIT_CONFIG_FIELDS
    return config.model_dump(mode="json", include=set(fields))
