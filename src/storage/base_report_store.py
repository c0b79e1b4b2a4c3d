# src/storage/base_report_store.py - v1
"""Abstract persistence store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from astroreport.storage.models import ReportRecord


class BaseReportStore(ABC):
    """Unified interface for report persistence backends.

    Backends raise PersistenceError for storage failures. Saving an existing
    report id for the same owner replaces the stored record.
    """

    @abstractmethod
    async def save(self, report_id: str, record: ReportRecord) -> None:
        """Store or replace a record."""

    @abstractmethod
    async def load_by_owner(self, owner_id: str) -> list[ReportRecord]:
        """All records of an owner, newest first."""

    @abstractmethod
    async def delete(self, report_id: str, owner_id: str) -> bool:
        """Delete one owned record. Returns False if it did not exist."""
