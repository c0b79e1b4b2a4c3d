# src/comparison/exporter.py - v1
"""Comparison export to JSON, CSV and self-contained HTML."""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from typing import Literal

from astroreport.comparison.models import ComparisonResult, ExportArtifact, ReportComparison
from astroreport.rendering.html import get_environment

logger = logging.getLogger(__name__)

ExportFormat = Literal["json", "csv", "html"]

CSV_HEADERS = ["Field", "Similarity", "Matches", "Differences"]

PALETTES: dict[str, dict[str, str]] = {
    "default": {
        "text": "#222222", "accent": "#4caf50", "rule": "#dddddd",
        "difference": "#ffebee", "similarity": "#e8f5e8",
    },
    "high-contrast": {
        "text": "#000000", "accent": "#000000", "rule": "#000000",
        "difference": "#ffff00", "similarity": "#00ffff",
    },
    "colorblind-friendly": {
        "text": "#222222", "accent": "#0072b2", "rule": "#999999",
        "difference": "#f0e442", "similarity": "#56b4e9",
    },
}

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slug(name: str) -> str:
    return _SLUG_RE.sub("-", name.lower()).strip("-") or "comparison"


def export_json(comparison: ReportComparison, result: ComparisonResult) -> str:
    """Structured document with the comparison and its result."""
    document = {
        "comparison": comparison.model_dump(mode="json"),
        "result": result.model_dump(mode="json"),
    }
    return json.dumps(document, indent=2)


def export_csv(result: ComparisonResult) -> str:
    """One row per field comparison, similarity to three decimals."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_HEADERS, lineterminator="\n")
    writer.writeheader()
    for fc in result.field_comparisons:
        writer.writerow({
            "Field": fc.field,
            "Similarity": f"{fc.similarity:.3f}",
            "Matches": fc.matches,
            "Differences": fc.differences,
        })
    return buffer.getvalue()


def export_html(comparison: ReportComparison, result: ComparisonResult) -> str:
    template = get_environment().get_template("comparison.html.j2")
    return template.render(
        comparison=comparison,
        result=result,
        field_names=comparison.settings.display_names(),
        palette=PALETTES[comparison.settings.color_scheme],
    )


def export_comparison(
    comparison: ReportComparison,
    result: ComparisonResult,
    fmt: ExportFormat,
) -> ExportArtifact:
    """Serialize a comparison result.

    Raises:
        ValueError: Unsupported format.
    """
    stem = _slug(comparison.name)
    if fmt == "json":
        artifact = ExportArtifact(
            content=export_json(comparison, result).encode("utf-8"),
            media_type="application/json",
            filename=f"{stem}.json",
        )
    elif fmt == "csv":
        artifact = ExportArtifact(
            content=export_csv(result).encode("utf-8"),
            media_type="text/csv",
            filename=f"{stem}.csv",
        )
    elif fmt == "html":
        artifact = ExportArtifact(
            content=export_html(comparison, result).encode("utf-8"),
            media_type="text/html",
            filename=f"{stem}.html",
        )
    else:
        raise ValueError(f"Unsupported export format: {fmt!r}")
    logger.debug("Exported comparison %s as %s (%d bytes)", comparison.id, fmt, len(artifact.content))
    return artifact
