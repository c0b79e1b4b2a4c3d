# src/pipeline/calculations.py - v1
"""Calculations stage: ephemeris call plus kind-specific post-processing.

Each report kind maps to one strategy in CALCULATION_STRATEGIES. Strategies
return a JSON-ready dict that becomes GeneratedReport.calculations; every
kind except compatibility exposes the natal ``planets`` list at top level.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from astroreport.core.errors import CalculationError
from astroreport.core.models import (
    BirthSubject,
    GenerationConfig,
    ReportKind,
    Subject,
    SubjectPair,
)
from astroreport.ephemeris.base_calculator import BaseEphemerisCalculator
from astroreport.ephemeris.models import ChartCalculation
from astroreport.pipeline.systems.chinese import four_pillars
from astroreport.pipeline.systems.hellenistic import hellenistic_techniques
from astroreport.pipeline.systems.synastry import compatibility
from astroreport.pipeline.systems.transit import compute_transits
from astroreport.pipeline.systems.vedic import sidereal_chart

logger = logging.getLogger(__name__)

STAGE = "calculations"

Strategy = Callable[
    [BaseEphemerisCalculator, Subject, GenerationConfig],
    Awaitable[dict[str, Any]],
]


async def _natal(calculator: BaseEphemerisCalculator, subject: BirthSubject) -> ChartCalculation:
    try:
        return await calculator.compute_positions(subject)
    except CalculationError:
        raise
    except Exception as exc:
        raise CalculationError(
            f"Ephemeris calculator {calculator.name} failed: {exc}",
            stage=STAGE,
            details={"calculator": calculator.name},
        ) from exc


def _chart_document(chart: ChartCalculation) -> dict[str, Any]:
    return chart.model_dump(mode="json")


async def _western(calculator, subject, config) -> dict[str, Any]:
    return _chart_document(await _natal(calculator, subject))


async def _vedic(calculator, subject, config) -> dict[str, Any]:
    chart = await _natal(calculator, subject)
    document = sidereal_chart(chart, subject.date)
    document["tropical"] = {"ascendant": chart.ascendant, "midheaven": chart.midheaven}
    return document


async def _chinese(calculator, subject, config) -> dict[str, Any]:
    chart = await _natal(calculator, subject)
    document = _chart_document(chart)
    document.update(four_pillars(subject.date, subject.time, chart.planet("Sun").longitude))
    return document


async def _hellenistic(calculator, subject, config) -> dict[str, Any]:
    chart = await _natal(calculator, subject)
    document = _chart_document(chart)
    document.update(hellenistic_techniques(chart))
    return document


async def _transit(calculator, subject, config) -> dict[str, Any]:
    if config.transit_start is None:
        raise CalculationError("Transit window start was not resolved", stage=STAGE)
    chart = await _natal(calculator, subject)
    document = _chart_document(chart)
    try:
        document.update(await compute_transits(
            calculator, subject, chart, config.transit_start, config.transit_days,
        ))
    except CalculationError:
        raise
    except Exception as exc:
        raise CalculationError(f"Transit scan failed: {exc}", stage=STAGE) from exc
    return document


async def _compatibility(calculator, subject, config) -> dict[str, Any]:
    primary = await _natal(calculator, subject.primary)
    partner = await _natal(calculator, subject.partner)
    document: dict[str, Any] = {
        "primary": _chart_document(primary),
        "partner": _chart_document(partner),
    }
    document.update(compatibility(primary, partner))
    return document


CALCULATION_STRATEGIES: dict[ReportKind, Strategy] = {
    ReportKind.WESTERN: _western,
    ReportKind.VEDIC: _vedic,
    ReportKind.CHINESE: _chinese,
    ReportKind.HELLENISTIC: _hellenistic,
    ReportKind.TRANSIT: _transit,
    ReportKind.COMPATIBILITY: _compatibility,
}


async def run_calculations(
    calculator: BaseEphemerisCalculator,
    subject: Subject,
    kind: ReportKind,
    config: GenerationConfig,
) -> dict[str, Any]:
    """Compute the calculation document for ``kind``.

    Raises:
        CalculationError: If the calculator or post-processing fails.
    """
    kind = ReportKind(kind)
    strategy = CALCULATION_STRATEGIES[kind]
    if isinstance(subject, SubjectPair) != (kind is ReportKind.COMPATIBILITY):
        raise CalculationError(f"Subject type does not match {kind.value}", stage=STAGE)
    try:
        document = await strategy(calculator, subject, config)
    except CalculationError:
        raise
    except Exception as exc:
        raise CalculationError(
            f"{kind.value} calculations failed: {exc}", stage=STAGE,
        ) from exc
    logger.debug("Calculations for %s produced %d keys", kind.value, len(document))
    return document
