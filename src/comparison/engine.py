# src/comparison/engine.py - v1
"""Weighted similarity and difference analysis across generated reports.

For each enabled field every report is projected to a normalized string and
all pairs are scored with normalized edit distance. A pair above
MATCH_THRESHOLD counts as a match, below DIFFERENCE_THRESHOLD as a
difference; the field similarity is the share of matching pairs. The
overall similarity is the weighted mean of the field similarities.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from astroreport.comparison.fields import get_field_definition
from astroreport.comparison.models import (
    ComparisonDifference,
    ComparisonField,
    ComparisonMatch,
    ComparisonResult,
    ComparisonSettings,
    DifferenceValue,
    FieldComparison,
)
from astroreport.comparison.similarity import normalize_value, pairwise_similarity_matrix
from astroreport.core.errors import InsufficientInputError
from astroreport.core.models import GeneratedReport

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.8
DIFFERENCE_THRESHOLD = 0.3


class ComparisonEngine:
    """Stateless comparison of two or more reports."""

    def compare(
        self,
        reports: Sequence[GeneratedReport],
        settings: ComparisonSettings | None = None,
    ) -> ComparisonResult:
        """Compare ``reports`` on the enabled fields of ``settings``.

        Raises:
            InsufficientInputError: Fewer than two reports.
        """
        if len(reports) < 2:
            raise InsufficientInputError(
                "At least 2 reports are required for comparison",
                details={"count": len(reports)},
            )
        settings = settings or ComparisonSettings()

        result = ComparisonResult()
        for field in settings.enabled_fields:
            values = [normalize_value(get_field_definition(field.field).extract(r)) for r in reports]
            result.field_comparisons.append(self._score_field(field.field, values))
            result.similarities.extend(self._shared_values(field.field, reports, values))
            result.differences.extend(self._distinct_values(field.field, reports, values))

        result.overall_similarity = overall_similarity(result.field_comparisons, settings.enabled_fields)
        logger.debug(
            "Compared %d reports on %d field(s): overall %.3f",
            len(reports), len(result.field_comparisons), result.overall_similarity,
        )
        return result

    @staticmethod
    def _score_field(field_id: str, values: list[str]) -> FieldComparison:
        matrix = pairwise_similarity_matrix(values)
        pairs = matrix[np.triu_indices(len(values), k=1)]
        matches = int(np.count_nonzero(pairs > MATCH_THRESHOLD))
        differences = int(np.count_nonzero(pairs < DIFFERENCE_THRESHOLD))
        return FieldComparison(
            field=field_id,
            similarity=matches / pairs.size if pairs.size else 0.0,
            matches=matches,
            differences=differences,
        )

    @staticmethod
    def _shared_values(
        field_id: str,
        reports: Sequence[GeneratedReport],
        values: list[str],
    ) -> list[ComparisonMatch]:
        groups: dict[str, list[str]] = {}
        for report, value in zip(reports, values):
            groups.setdefault(value, []).append(report.id)
        return [
            ComparisonMatch(
                field=field_id,
                value=value,
                confidence=len(ids) / len(reports),
                reports=ids,
            )
            for value, ids in groups.items()
            if len(ids) > 1
        ]

    @staticmethod
    def _distinct_values(
        field_id: str,
        reports: Sequence[GeneratedReport],
        values: list[str],
    ) -> list[ComparisonDifference]:
        if len(set(values)) != len(reports):
            return []
        definition = get_field_definition(field_id)
        return [ComparisonDifference(
            field=field_id,
            values=[DifferenceValue(report_id=r.id, value=v) for r, v in zip(reports, values)],
            significance=definition.significance,
            category=definition.category,
        )]


def overall_similarity(
    comparisons: Sequence[FieldComparison],
    fields: Sequence[ComparisonField],
) -> float:
    """Weighted mean of field similarities; weight-0 fields do not count."""
    weights = {f.field: f.weight for f in fields}
    total_weight = 0.0
    weighted_sum = 0.0
    for comparison in comparisons:
        weight = weights.get(comparison.field, 0.0)
        if weight <= 0:
            continue
        weighted_sum += comparison.similarity * weight
        total_weight += weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0
