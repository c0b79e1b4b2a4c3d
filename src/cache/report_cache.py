# src/cache/report_cache.py - v1
"""In-memory report cache keyed by fingerprint with a validity window.

An entry is served only while ``now - report.metadata.generated_at`` is
below the validity window; an expired entry is evicted on access. The map is
guarded by a single lock so the cache can be shared by concurrent
generations (asyncio tasks or threads). Concurrent puts for the same
fingerprint are last-writer-wins.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Callable

from astroreport.cache.models import CacheEntry, CacheStats
from astroreport.core.models import GeneratedReport

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_VALIDITY = timedelta(hours=24)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReportCache:
    """Fingerprint -> GeneratedReport map with expiry and optional size bound.

    Args:
        validity: How long a report stays servable after generation.
        clock: Returns the current aware datetime; injectable for tests.
        max_entries: 0 for unbounded, otherwise least-recently-used entries
            are evicted beyond this size.
    """

    def __init__(
        self,
        validity: timedelta = DEFAULT_VALIDITY,
        clock: Clock | None = None,
        max_entries: int = 0,
    ) -> None:
        if validity <= timedelta(0):
            raise ValueError("Cache validity must be positive")
        self._validity = validity
        self._clock = clock or utc_now
        self._max_entries = max(0, max_entries)
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._evicted = 0

    @property
    def validity(self) -> timedelta:
        return self._validity

    def is_fresh(self, report: GeneratedReport) -> bool:
        """Whether a report is still inside the validity window."""
        age = self._clock() - _as_utc(report.metadata.generated_at)
        return age < self._validity

    def get(self, fingerprint: str) -> GeneratedReport | None:
        """Return the cached report, or None on miss or expiry."""
        with self._lock:
            entry = self._store.get(fingerprint)
            if entry is None:
                self._misses += 1
                return None
            if not self.is_fresh(entry.report):
                del self._store[fingerprint]
                self._expired += 1
                self._misses += 1
                logger.debug("Cache entry %s expired", fingerprint)
                return None
            entry.hits += 1
            self._hits += 1
            self._store.move_to_end(fingerprint)
            return entry.report

    def put(self, fingerprint: str, report: GeneratedReport) -> None:
        """Store a report; replaces any previous entry for the fingerprint."""
        entry = CacheEntry(fingerprint=fingerprint, report=report, stored_at=self._clock())
        with self._lock:
            self._store[fingerprint] = entry
            self._store.move_to_end(fingerprint)
            self._enforce_max_entries_unlocked()

    def invalidate(self, fingerprint: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        with self._lock:
            return self._store.pop(fingerprint, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def sweep_expired(self) -> int:
        """Evict every expired entry. Returns the number evicted."""
        with self._lock:
            stale = [k for k, e in self._store.items() if not self.is_fresh(e.report)]
            for key in stale:
                del self._store[key]
            self._expired += len(stale)
        if stale:
            logger.info("Swept %d expired report(s) from cache", len(stale))
        return len(stale)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._store),
                hits=self._hits,
                misses=self._misses,
                expired=self._expired,
                evicted=self._evicted,
            )

    async def run_sweeper(self, interval_s: float, stop: asyncio.Event) -> None:
        """Sweep expired entries every ``interval_s`` seconds until ``stop`` is set."""
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval_s)
            except asyncio.TimeoutError:
                self.sweep_expired()

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _enforce_max_entries_unlocked(self) -> None:
        if not self._max_entries:
            return
        while len(self._store) > self._max_entries:
            key, _ = self._store.popitem(last=False)
            self._evicted += 1
            logger.debug("Evicted least-recently-used report %s", key)
