# src/pipeline/systems/transit.py - v1
"""Transits of the slow-moving planets to a natal chart over a date window."""

from __future__ import annotations

import datetime as dt
from typing import Any

from astroreport.core.models import BirthSubject
from astroreport.ephemeris.base_calculator import BaseEphemerisCalculator
from astroreport.ephemeris.models import ChartCalculation
from astroreport.ephemeris.zodiac import match_aspect

TRANSITING_BODIES: tuple[str, ...] = (
    "Sun", "Mars", "Jupiter", "Saturn", "Uranus", "Neptune", "Pluto",
)
NATAL_POINTS: tuple[str, ...] = (
    "Sun", "Moon", "Mercury", "Venus", "Mars", "Jupiter", "Saturn",
)
# Orb for a transit to count as active on a given day.
TRANSIT_ORB = 1.5


def _natal_targets(natal: ChartCalculation) -> dict[str, float]:
    targets = {p.name: p.longitude for p in natal.planets if p.name in NATAL_POINTS}
    targets["Ascendant"] = natal.ascendant
    targets["Midheaven"] = natal.midheaven
    return targets


async def compute_transits(
    calculator: BaseEphemerisCalculator,
    subject: BirthSubject,
    natal: ChartCalculation,
    start: dt.date,
    days: int,
) -> dict[str, Any]:
    """Scan ``days`` daily charts from ``start`` and collapse hits into periods.

    A period is a run of consecutive days on which the same transiting body
    keeps the same aspect to the same natal point within TRANSIT_ORB.
    """
    targets = _natal_targets(natal)
    open_periods: dict[tuple[str, str, str], dict[str, Any]] = {}
    periods: list[dict[str, Any]] = []

    for offset in range(days):
        day = start + dt.timedelta(days=offset)
        sky = await calculator.compute_positions(subject.model_copy(update={"date": day}))
        seen: set[tuple[str, str, str]] = set()

        for body in sky.planets:
            if body.name not in TRANSITING_BODIES:
                continue
            for target, target_lon in targets.items():
                found = match_aspect(body.longitude, target_lon)
                if found is None or found[1] > TRANSIT_ORB:
                    continue
                rule, orb = found
                key = (body.name, target, rule.name)
                seen.add(key)
                period = open_periods.get(key)
                if period is None:
                    period = {
                        "transiting": body.name,
                        "natal": target,
                        "aspect": rule.name,
                        "harmonious": rule.harmonious,
                        "start": day.isoformat(),
                        "end": day.isoformat(),
                        "peak": day.isoformat(),
                        "orb": round(orb, 3),
                        "retrograde": body.retrograde,
                    }
                    open_periods[key] = period
                    periods.append(period)
                else:
                    period["end"] = day.isoformat()
                    if orb < period["orb"]:
                        period["peak"] = day.isoformat()
                        period["orb"] = round(orb, 3)

        for key in [k for k in open_periods if k not in seen]:
            del open_periods[key]

    periods.sort(key=lambda p: (p["start"], p["orb"]))
    end = start + dt.timedelta(days=days - 1)
    return {
        "window": {"start": start.isoformat(), "end": end.isoformat(), "days": days},
        "transits": periods,
    }
