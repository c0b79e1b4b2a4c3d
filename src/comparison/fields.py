# src/comparison/fields.py - v1
"""Closed registry of comparable report fields.

Each field knows how to project a GeneratedReport onto a string, which
significance tier a difference on it carries and which category it is
shown under. The registry is checked when this module is imported, so an
inconsistent entry fails at startup rather than during a comparison.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Literal

from astroreport.core.errors import UnknownFieldError
from astroreport.core.models import GeneratedReport

Significance = Literal["high", "medium", "low"]

SIGNIFICANCE_TIERS: frozenset[str] = frozenset({"high", "medium", "low"})


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _content(report: GeneratedReport) -> str:
    return report.outputs.html or ""


def _report_type(report: GeneratedReport) -> str:
    return report.kind.value


def _birth_data(report: GeneratedReport) -> str:
    return canonical_json(report.subject.model_dump(mode="json"))


def _planetary_positions(report: GeneratedReport) -> str:
    planets = report.calculations.get("planets") or []
    return canonical_json([
        {"name": p.get("name"), "sign": p.get("sign"), "degree": p.get("degree")}
        for p in planets
    ])


def _summary(report: GeneratedReport) -> str:
    return report.content.summary or ""


@dataclass(frozen=True)
class FieldDefinition:
    """One comparable field."""

    field_id: str
    display_name: str
    category: str
    significance: Significance
    extract: Callable[[GeneratedReport], str]
    default_weight: float = 1.0
    enabled_by_default: bool = True


FIELD_REGISTRY: dict[str, FieldDefinition] = {
    definition.field_id: definition
    for definition in (
        FieldDefinition("content", "Content", "Content", "low", _content, 1.0),
        FieldDefinition("report_type", "Report Type", "Report Type", "high", _report_type, 0.8),
        FieldDefinition("birth_data", "Birth Data", "Birth Information", "high", _birth_data, 0.6),
        FieldDefinition(
            "planetary_positions", "Planetary Positions", "Astrological Data", "medium",
            _planetary_positions, 0.7,
        ),
        FieldDefinition("summary", "Summary", "Summary", "low", _summary, 0.5, enabled_by_default=False),
    )
}


def _validate_registry(registry: dict[str, FieldDefinition]) -> None:
    for key, definition in registry.items():
        if key != definition.field_id:
            raise RuntimeError(f"Field registry key {key!r} does not match {definition.field_id!r}")
        if definition.significance not in SIGNIFICANCE_TIERS:
            raise RuntimeError(f"Field {key!r} has unknown significance {definition.significance!r}")
        if definition.default_weight < 0:
            raise RuntimeError(f"Field {key!r} has a negative default weight")
        if not callable(definition.extract):
            raise RuntimeError(f"Field {key!r} has no extractor")


_validate_registry(FIELD_REGISTRY)


def get_field_definition(field_id: str) -> FieldDefinition:
    """Look up a registered field.

    Raises:
        UnknownFieldError: If ``field_id`` is not registered.
    """
    try:
        return FIELD_REGISTRY[field_id]
    except KeyError:
        raise UnknownFieldError(
            f"Unknown comparison field: {field_id!r}",
            details={"available": sorted(FIELD_REGISTRY)},
        ) from None


def extract_value(report: GeneratedReport, field_id: str) -> str:
    return get_field_definition(field_id).extract(report)
