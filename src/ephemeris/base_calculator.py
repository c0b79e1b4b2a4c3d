# src/ephemeris/base_calculator.py - v1
"""Abstract ephemeris calculator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from astroreport.core.models import BirthSubject
from astroreport.ephemeris.models import ChartCalculation


class BaseEphemerisCalculator(ABC):
    """Computes planetary positions for a subject's moment and place.

    Implementations must be deterministic for identical subjects. Any
    exception raised is reported by the pipeline as a CalculationError.
    """

    @abstractmethod
    async def compute_positions(self, subject: BirthSubject) -> ChartCalculation:
        """Planets, houses, aspects, ascendant and midheaven for ``subject``."""

    @property
    def name(self) -> str:
        return type(self).__name__
