# src/cache/models.py - v2
"""Report cache models: CacheEntry, CacheStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from astroreport.core.models import GeneratedReport


class CacheEntry(BaseModel):
    """Single cache entry linking a fingerprint to a generated report."""

    fingerprint: str
    report: GeneratedReport
    stored_at: datetime
    hits: int = 0


class CacheStats(BaseModel):
    entries: int
    hits: int
    misses: int
    expired: int
    evicted: int
