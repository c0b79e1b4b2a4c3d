# src/storage/store_factory.py - v1
"""Factory for persistence store instantiation."""

from __future__ import annotations

from astroreport.config.settings import Settings
from astroreport.storage.base_report_store import BaseReportStore


def create_report_store(settings: Settings | None = None) -> BaseReportStore:
    """Instantiate the configured persistence backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseReportStore implementation.
    """
    if settings is None or settings.persistence_backend == "memory":
        from astroreport.storage.memory_store import MemoryReportStore
        return MemoryReportStore()

    backend = settings.persistence_backend
    if backend == "json":
        from astroreport.storage.json_store import JsonReportStore
        return JsonReportStore(root=settings.persistence_root)

    raise ValueError(f"Unsupported persistence backend: {backend!r}")
