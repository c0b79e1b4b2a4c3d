# src/pipeline/systems/hellenistic.py - v1
"""Hellenistic techniques: sect, the Lots of Fortune and Spirit, house rulers."""

from __future__ import annotations

from typing import Any

from astroreport.ephemeris.models import ChartCalculation
from astroreport.ephemeris.zodiac import SIGN_RULERS, house_of, normalize, sign_index, sign_of

# Benefic/malefic of sect, keyed by sect.
SECT_LIGHT = {"day": "Sun", "night": "Moon"}
SECT_BENEFIC = {"day": "Jupiter", "night": "Venus"}
SECT_MALEFIC = {"day": "Saturn", "night": "Mars"}


def chart_sect(sun_house: int) -> str:
    """Day chart when the Sun is above the horizon (houses 7-12)."""
    return "day" if 7 <= sun_house <= 12 else "night"


def lot_of_fortune(ascendant: float, sun: float, moon: float, sect: str) -> float:
    if sect == "day":
        return normalize(ascendant + moon - sun)
    return normalize(ascendant + sun - moon)


def lot_of_spirit(ascendant: float, sun: float, moon: float, sect: str) -> float:
    if sect == "day":
        return normalize(ascendant + sun - moon)
    return normalize(ascendant + moon - sun)


def _point(name: str, longitude: float, ascendant: float) -> dict[str, Any]:
    sign, degree = sign_of(longitude)
    return {
        "name": name,
        "longitude": round(longitude, 4),
        "sign": sign,
        "degree": degree,
        "house": house_of(longitude, ascendant),
        "ruler": SIGN_RULERS[sign_index(longitude)],
    }


def hellenistic_techniques(chart: ChartCalculation) -> dict[str, Any]:
    sun = chart.planet("Sun")
    moon = chart.planet("Moon")
    sect = chart_sect(sun.house)
    asc = chart.ascendant

    houses_by_planet = {p.name: p.house for p in chart.planets}
    rulers = [
        {
            "house": cusp.house,
            "sign": cusp.sign,
            "ruler": cusp.ruler,
            "ruler_house": houses_by_planet.get(cusp.ruler),
        }
        for cusp in chart.houses
    ]

    return {
        "sect": {
            "sect": sect,
            "light": SECT_LIGHT[sect],
            "benefic": SECT_BENEFIC[sect],
            "malefic": SECT_MALEFIC[sect],
        },
        "lots": [
            _point("Fortune", lot_of_fortune(asc, sun.longitude, moon.longitude, sect), asc),
            _point("Spirit", lot_of_spirit(asc, sun.longitude, moon.longitude, sect), asc),
        ],
        "house_rulers": rulers,
    }
