# src/ephemeris/zodiac.py - v1
"""Zodiac arithmetic shared by calculators and kind-specific calculations."""

from __future__ import annotations

from itertools import combinations
from typing import Iterable, NamedTuple

from astroreport.ephemeris.models import Aspect, PlanetPosition

SIGN_NAMES: tuple[str, ...] = (
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
)

# Traditional (pre-modern) domicile rulers, indexed like SIGN_NAMES.
SIGN_RULERS: tuple[str, ...] = (
    "Mars", "Venus", "Mercury", "Moon", "Sun", "Mercury",
    "Venus", "Mars", "Jupiter", "Saturn", "Saturn", "Jupiter",
)

SIGN_ELEMENTS: tuple[str, ...] = ("Fire", "Earth", "Air", "Water") * 3


class AspectRule(NamedTuple):
    name: str
    angle: float
    orb: float
    harmonious: bool | None


MAJOR_ASPECTS: tuple[AspectRule, ...] = (
    AspectRule("conjunction", 0.0, 8.0, None),
    AspectRule("sextile", 60.0, 6.0, True),
    AspectRule("square", 90.0, 7.0, False),
    AspectRule("trine", 120.0, 8.0, True),
    AspectRule("opposition", 180.0, 8.0, False),
)


def normalize(longitude: float) -> float:
    """Wrap a longitude into [0, 360)."""
    value = longitude % 360.0
    return 0.0 if value >= 360.0 else value


def sign_index(longitude: float) -> int:
    return int(normalize(longitude) // 30.0) % 12


def sign_of(longitude: float) -> tuple[str, float]:
    """Return (sign name, degree within sign)."""
    lon = normalize(longitude)
    return SIGN_NAMES[sign_index(lon)], round(lon % 30.0, 4)


def angular_distance(a: float, b: float) -> float:
    """Shortest arc between two longitudes, in [0, 180]."""
    diff = abs(normalize(a) - normalize(b))
    return 360.0 - diff if diff > 180.0 else diff


def house_of(longitude: float, ascendant: float) -> int:
    """Equal-house number (1..12) counted from the ascendant."""
    return int(normalize(longitude - ascendant) // 30.0) + 1


def whole_sign_house(longitude: float, ascendant: float) -> int:
    return (sign_index(longitude) - sign_index(ascendant)) % 12 + 1


def match_aspect(
    lon_a: float,
    lon_b: float,
    rules: Iterable[AspectRule] = MAJOR_ASPECTS,
    orb_scale: float = 1.0,
) -> tuple[AspectRule, float] | None:
    """Return the tightest matching aspect and its orb, if any."""
    distance = angular_distance(lon_a, lon_b)
    best: tuple[AspectRule, float] | None = None
    for rule in rules:
        orb = abs(distance - rule.angle)
        if orb <= rule.orb * orb_scale and (best is None or orb < best[1]):
            best = (rule, orb)
    return best


def find_aspects(planets: list[PlanetPosition], orb_scale: float = 1.0) -> list[Aspect]:
    """Major aspects between every pair of bodies, tightest first."""
    aspects: list[Aspect] = []
    for a, b in combinations(planets, 2):
        found = match_aspect(a.longitude, b.longitude, orb_scale=orb_scale)
        if found is None:
            continue
        rule, orb = found
        aspects.append(Aspect(
            body_a=a.name,
            body_b=b.name,
            aspect=rule.name,
            angle=rule.angle,
            orb=round(orb, 3),
            harmonious=rule.harmonious,
        ))
    aspects.sort(key=lambda x: x.orb)
    return aspects
