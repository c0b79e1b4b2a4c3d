# src/ephemeris/deterministic.py - v1
"""Deterministic ephemeris based on mean orbital elements.

Positions are computed from J2000 mean longitudes with circular
heliocentric orbits projected onto the Earth, which is accurate to within
several degrees for the planets and good enough for report generation and tests.
No external data files or network access are needed; identical subjects
always produce identical charts.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from astroreport.core.errors import CalculationError
from astroreport.core.models import BirthSubject
from astroreport.ephemeris.base_calculator import BaseEphemerisCalculator
from astroreport.ephemeris.models import ChartCalculation, HouseCusp, PlanetPosition
from astroreport.ephemeris.zodiac import (
    SIGN_RULERS,
    find_aspects,
    house_of,
    normalize,
    sign_index,
    sign_of,
)

J2000 = 2451545.0
_J2000_UTC = datetime(2000, 1, 1, 12, 0, tzinfo=timezone.utc)

# name: (mean longitude at J2000 [deg], daily motion [deg/day], semi-major axis [AU])
_ORBITS: dict[str, tuple[float, float, float]] = {
    "Mercury": (252.2509, 4.09233445, 0.387098),
    "Venus": (181.9798, 1.60213034, 0.723332),
    "Mars": (355.4330, 0.52402068, 1.523679),
    "Jupiter": (34.3515, 0.08308529, 5.202603),
    "Saturn": (50.0774, 0.03344414, 9.554909),
    "Uranus": (314.0550, 0.01172834, 19.218446),
    "Neptune": (304.3487, 0.00598103, 30.110387),
    "Pluto": (238.9288, 0.00397570, 39.482117),
}
_EARTH = (100.4664, 0.98560910, 1.0)

PLANET_NAMES: tuple[str, ...] = (
    "Sun", "Moon", "Mercury", "Venus", "Mars", "Jupiter",
    "Saturn", "Uranus", "Neptune", "Pluto", "North Node",
)


def julian_day(subject: BirthSubject) -> float:
    """Julian day (UT) of the subject's local birth moment."""
    if subject.date is None or subject.time is None:
        raise CalculationError("Birth date and time are required for a chart")
    tz = ZoneInfo(subject.location.timezone if subject.location else "UTC")
    local = datetime.combine(subject.date, subject.time).replace(tzinfo=tz)
    delta = local.astimezone(timezone.utc) - _J2000_UTC
    return J2000 + delta.total_seconds() / 86400.0


def _sin(deg: float) -> float:
    return math.sin(math.radians(deg))


def _cos(deg: float) -> float:
    return math.cos(math.radians(deg))


def _sun(d: float) -> float:
    mean = 280.460 + 0.9856474 * d
    anomaly = 357.528 + 0.9856003 * d
    return normalize(mean + 1.915 * _sin(anomaly) + 0.020 * _sin(2 * anomaly))


def _moon(d: float) -> float:
    mean = 218.316 + 13.176396 * d
    anomaly = 134.963 + 13.064993 * d
    return normalize(mean + 6.289 * _sin(anomaly))


def _north_node(d: float) -> float:
    return normalize(125.04452 - 0.0529538083 * d)


def _geocentric(name: str, d: float) -> float:
    l0, rate, a = _ORBITS[name]
    e0, e_rate, e_a = _EARTH
    lp = l0 + rate * d
    le = e0 + e_rate * d
    x = a * _cos(lp) - e_a * _cos(le)
    y = a * _sin(lp) - e_a * _sin(le)
    return normalize(math.degrees(math.atan2(y, x)))


def body_longitude(name: str, d: float) -> float:
    """Geocentric ecliptic longitude of ``name`` at ``d`` days from J2000."""
    if name == "Sun":
        return _sun(d)
    if name == "Moon":
        return _moon(d)
    if name == "North Node":
        return _north_node(d)
    return _geocentric(name, d)


def _daily_speed(name: str, d: float) -> float:
    before = body_longitude(name, d - 0.5)
    after = body_longitude(name, d + 0.5)
    return ((after - before + 540.0) % 360.0) - 180.0


def chart_angles(jd: float, latitude: float, longitude: float) -> tuple[float, float]:
    """Return (ascendant, midheaven) ecliptic longitudes."""
    d = jd - J2000
    ramc = normalize(280.46061837 + 360.98564736629 * d + longitude)
    eps = 23.4393 - 0.0000004 * d
    lat = max(-89.9, min(89.9, latitude))
    mc = math.degrees(math.atan2(_sin(ramc), _cos(ramc) * _cos(eps)))
    asc = math.degrees(math.atan2(
        _cos(ramc),
        -(_sin(ramc) * _cos(eps) + math.tan(math.radians(lat)) * _sin(eps)),
    ))
    return normalize(asc), normalize(mc)


class DeterministicEphemeris(BaseEphemerisCalculator):
    """Mean-element ephemeris with equal houses from the ascendant."""

    def __init__(self, orb_scale: float = 1.0) -> None:
        self._orb_scale = orb_scale

    async def compute_positions(self, subject: BirthSubject) -> ChartCalculation:
        return self.compute_sync(subject)

    def compute_sync(self, subject: BirthSubject) -> ChartCalculation:
        if subject.location is None or subject.location.latitude is None \
                or subject.location.longitude is None:
            raise ValueError("Subject location with coordinates is required")
        jd = julian_day(subject)
        d = jd - J2000
        asc, mc = chart_angles(jd, subject.location.latitude, subject.location.longitude)

        planets: list[PlanetPosition] = []
        for name in PLANET_NAMES:
            lon = normalize(round(body_longitude(name, d), 4))
            speed = _daily_speed(name, d)
            sign, degree = sign_of(lon)
            planets.append(PlanetPosition(
                name=name,
                longitude=lon,
                sign=sign,
                degree=degree,
                house=house_of(lon, asc),
                retrograde=speed < 0,
                speed=round(speed, 4),
            ))

        houses: list[HouseCusp] = []
        for number in range(1, 13):
            cusp = normalize(asc + 30.0 * (number - 1))
            sign, degree = sign_of(cusp)
            houses.append(HouseCusp(
                house=number,
                longitude=normalize(round(cusp, 4)),
                sign=sign,
                degree=degree,
                ruler=SIGN_RULERS[sign_index(cusp)],
            ))

        return ChartCalculation(
            julian_day=round(jd, 6),
            ascendant=normalize(round(asc, 4)),
            midheaven=normalize(round(mc, 4)),
            planets=planets,
            houses=houses,
            aspects=find_aspects(planets, orb_scale=self._orb_scale),
        )
