# src/comparison/store.py - v1
"""In-memory store of saved report comparisons."""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Sequence

from astroreport.comparison.models import ComparisonSettings, ReportComparison
from astroreport.core.errors import InsufficientInputError
from astroreport.core.models import GeneratedReport

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = frozenset({"name", "comparison_type", "settings", "report_ids"})


class ComparisonStore:
    """Keeps ReportComparison objects by id for the lifetime of the service."""

    def __init__(self) -> None:
        self._items: dict[str, ReportComparison] = {}
        self._lock = threading.Lock()

    def create(
        self,
        name: str,
        reports: Sequence[GeneratedReport],
        settings: ComparisonSettings | None = None,
        owner_id: str | None = None,
    ) -> ReportComparison:
        """Save a new comparison over at least two reports."""
        if len(reports) < 2:
            raise InsufficientInputError(
                "At least 2 reports are required for comparison",
                details={"count": len(reports)},
            )
        comparison = ReportComparison(
            id=str(uuid.uuid4()),
            name=name,
            report_ids=[r.id for r in reports],
            owner_id=owner_id,
            settings=settings or ComparisonSettings(),
        )
        with self._lock:
            self._items[comparison.id] = comparison
        logger.info("Created comparison %s over %d reports", comparison.id, len(reports))
        return comparison

    def get(self, comparison_id: str) -> ReportComparison | None:
        with self._lock:
            return self._items.get(comparison_id)

    def list(self, owner_id: str | None = None) -> list[ReportComparison]:
        with self._lock:
            items = list(self._items.values())
        if owner_id is not None:
            items = [c for c in items if c.owner_id == owner_id]
        return sorted(items, key=lambda c: c.created_at)

    def update(self, comparison_id: str, **updates: Any) -> ReportComparison | None:
        """Apply updates and bump ``updated_at``. Returns None if unknown."""
        unknown = set(updates) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        if "report_ids" in updates and len(updates["report_ids"]) < 2:
            raise InsufficientInputError("At least 2 reports are required for comparison")
        with self._lock:
            current = self._items.get(comparison_id)
            if current is None:
                return None
            data = current.model_dump()
            data.update(updates)
            data["updated_at"] = datetime.now(timezone.utc)
            updated = ReportComparison.model_validate(data)
            self._items[comparison_id] = updated
        return updated

    def delete(self, comparison_id: str) -> bool:
        with self._lock:
            return self._items.pop(comparison_id, None) is not None

    def __len__(self) -> int:
        return len(self._items)
