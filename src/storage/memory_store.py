# src/storage/memory_store.py - v1
"""In-process report store (default PERSISTENCE_BACKEND=memory)."""

from __future__ import annotations

import asyncio
import logging

from astroreport.storage.base_report_store import BaseReportStore
from astroreport.storage.models import ReportRecord

logger = logging.getLogger(__name__)


class MemoryReportStore(BaseReportStore):
    """Dict-backed store keyed by (owner_id, report_id)."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], ReportRecord] = {}
        self._lock = asyncio.Lock()

    async def save(self, report_id: str, record: ReportRecord) -> None:
        async with self._lock:
            self._records[(record.owner_id, report_id)] = record
        logger.debug("Saved report %s for owner %s", report_id, record.owner_id)

    async def load_by_owner(self, owner_id: str) -> list[ReportRecord]:
        async with self._lock:
            records = [r for (owner, _), r in self._records.items() if owner == owner_id]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    async def delete(self, report_id: str, owner_id: str) -> bool:
        async with self._lock:
            return self._records.pop((owner_id, report_id), None) is not None

    def __len__(self) -> int:
        return len(self._records)
