# src/storage/json_store.py - v1
"""JSON file report store (PERSISTENCE_BACKEND=json).

Layout: ``<root>/<owner_id>/<report_id>.json``, one record per file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError as ModelValidationError

from astroreport.core.errors import PersistenceError
from astroreport.storage.base_report_store import BaseReportStore
from astroreport.storage.models import ReportRecord

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_.-]")


def _safe(part: str) -> str:
    cleaned = _UNSAFE_RE.sub("_", part).strip(".")
    if not cleaned:
        raise PersistenceError(f"Invalid storage key: {part!r}")
    return cleaned


class JsonReportStore(BaseReportStore):
    """File-based store using one JSON document per report."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()

    async def save(self, report_id: str, record: ReportRecord) -> None:
        path = self._record_path(record.owner_id, report_id)
        payload = record.model_dump_json(indent=2)
        try:
            await asyncio.to_thread(self._write, path, payload)
        except OSError as exc:
            raise PersistenceError(
                f"Cannot save report {report_id}: {exc}",
                details={"path": str(path)},
            ) from exc

    async def load_by_owner(self, owner_id: str) -> list[ReportRecord]:
        owner_dir = self._root / _safe(owner_id)
        try:
            records = await asyncio.to_thread(self._read_dir, owner_dir)
        except OSError as exc:
            raise PersistenceError(f"Cannot list reports of {owner_id}: {exc}") from exc
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    async def delete(self, report_id: str, owner_id: str) -> bool:
        path = self._record_path(owner_id, report_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise PersistenceError(f"Cannot delete report {report_id}: {exc}") from exc
        return True

    def _record_path(self, owner_id: str, report_id: str) -> Path:
        return self._root / _safe(owner_id) / f"{_safe(report_id)}.json"

    @staticmethod
    def _write(path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(path)

    @staticmethod
    def _read_dir(owner_dir: Path) -> list[ReportRecord]:
        records: list[ReportRecord] = []
        if not owner_dir.is_dir():
            return records
        for path in owner_dir.glob("*.json"):
            try:
                records.append(ReportRecord.model_validate(
                    json.loads(path.read_text(encoding="utf-8"))
                ))
            except (json.JSONDecodeError, ModelValidationError) as exc:
                logger.warning("Skipping unreadable report file %s: %s", path, exc)
        return records
