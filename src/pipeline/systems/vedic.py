# src/pipeline/systems/vedic.py - v1
"""Sidereal (Jyotish) post-processing of a tropical chart.

Applies a Lahiri-style ayanamsa, recomputes signs and whole-sign houses,
and derives nakshatras, the Vimshottari maha-dasha sequence and a few
classical yogas.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from astroreport.ephemeris.deterministic import J2000
from astroreport.ephemeris.models import ChartCalculation
from astroreport.ephemeris.zodiac import (
    SIGN_NAMES,
    normalize,
    sign_index,
    sign_of,
    whole_sign_house,
)

NAKSHATRA_NAMES: tuple[str, ...] = (
    "Ashwini", "Bharani", "Krittika", "Rohini", "Mrigashira", "Ardra",
    "Punarvasu", "Pushya", "Ashlesha", "Magha", "Purva Phalguni", "Uttara Phalguni",
    "Hasta", "Chitra", "Swati", "Vishakha", "Anuradha", "Jyeshtha",
    "Mula", "Purva Ashadha", "Uttara Ashadha", "Shravana", "Dhanishta", "Shatabhisha",
    "Purva Bhadrapada", "Uttara Bhadrapada", "Revati",
)
NAKSHATRA_SPAN = 360.0 / 27
PADA_SPAN = NAKSHATRA_SPAN / 4

# Vimshottari order starting from Ashwini; lords repeat every nine nakshatras.
DASHA_SEQUENCE: tuple[tuple[str, int], ...] = (
    ("Ketu", 7), ("Venus", 20), ("Sun", 6), ("Moon", 10), ("Mars", 7),
    ("Rahu", 18), ("Jupiter", 16), ("Saturn", 19), ("Mercury", 17),
)
DAYS_PER_YEAR = 365.25

GRAHAS: tuple[str, ...] = ("Sun", "Moon", "Mars", "Mercury", "Jupiter", "Venus", "Saturn")

# Lahiri ayanamsa at J2000 and its annual precession (50.29 arc-seconds).
AYANAMSA_J2000 = 23.853
AYANAMSA_RATE = 50.29 / 3600.0


def lahiri_ayanamsa(julian_day: float) -> float:
    years = (julian_day - J2000) / DAYS_PER_YEAR
    return AYANAMSA_J2000 + years * AYANAMSA_RATE


def nakshatra_of(longitude: float) -> dict[str, Any]:
    """Nakshatra name, index, pada (1-4) and dasha lord for a sidereal longitude."""
    lon = normalize(longitude)
    index = min(int(lon // NAKSHATRA_SPAN), 26)
    pada = min(int((lon - index * NAKSHATRA_SPAN) // PADA_SPAN) + 1, 4)
    return {
        "index": index,
        "name": NAKSHATRA_NAMES[index],
        "pada": pada,
        "lord": DASHA_SEQUENCE[index % 9][0],
    }


def vimshottari_dashas(moon_longitude: float, birth_date: dt.date) -> list[dict[str, Any]]:
    """Nine maha-dasha periods from birth, the first one shortened by the elapsed part."""
    lon = normalize(moon_longitude)
    index = min(int(lon // NAKSHATRA_SPAN), 26)
    elapsed = (lon - index * NAKSHATRA_SPAN) / NAKSHATRA_SPAN
    first = index % 9

    periods: list[dict[str, Any]] = []
    start = birth_date
    for offset in range(9):
        lord, years = DASHA_SEQUENCE[(first + offset) % 9]
        span = years * (1.0 - elapsed) if offset == 0 else float(years)
        end = start + dt.timedelta(days=round(span * DAYS_PER_YEAR))
        periods.append({
            "lord": lord,
            "years": round(span, 2),
            "start": start.isoformat(),
            "end": end.isoformat(),
        })
        start = end
    return periods


def detect_yogas(signs: dict[str, int]) -> list[dict[str, Any]]:
    """Gaja Kesari, Budha-Aditya and Chandra-Mangala yogas from sign indices."""
    yogas: list[dict[str, Any]] = []

    moon, jupiter = signs["Moon"], signs["Jupiter"]
    if (jupiter - moon) % 12 in (0, 3, 6, 9):
        yogas.append({
            "name": "Gaja Kesari",
            "planets": ["Jupiter", "Moon"],
            "description": "Jupiter in an angle from the Moon",
        })
    if signs["Sun"] == signs["Mercury"]:
        yogas.append({
            "name": "Budha-Aditya",
            "planets": ["Sun", "Mercury"],
            "description": "Sun and Mercury share a sign",
        })
    if signs["Moon"] == signs["Mars"]:
        yogas.append({
            "name": "Chandra-Mangala",
            "planets": ["Moon", "Mars"],
            "description": "Moon and Mars share a sign",
        })
    return yogas


def sidereal_chart(chart: ChartCalculation, birth_date: dt.date) -> dict[str, Any]:
    """Convert a tropical chart into the sidereal calculation document."""
    ayanamsa = lahiri_ayanamsa(chart.julian_day)
    ascendant = normalize(chart.ascendant - ayanamsa)

    longitudes = {p.name: p for p in chart.planets}
    bodies: list[tuple[str, float, bool]] = [
        (name, normalize(longitudes[name].longitude - ayanamsa), longitudes[name].retrograde)
        for name in GRAHAS
    ]
    rahu = normalize(longitudes["North Node"].longitude - ayanamsa)
    bodies.append(("Rahu", rahu, True))
    bodies.append(("Ketu", normalize(rahu + 180.0), True))

    planets: list[dict[str, Any]] = []
    nakshatras: list[dict[str, Any]] = []
    for name, lon, retrograde in bodies:
        sign, degree = sign_of(lon)
        planets.append({
            "name": name,
            "longitude": round(lon, 4),
            "sign": sign,
            "degree": degree,
            "house": whole_sign_house(lon, ascendant),
            "retrograde": retrograde,
        })
        nakshatras.append({"planet": name, **nakshatra_of(lon)})

    asc_sign = sign_index(ascendant)
    houses = [
        {"house": n, "sign": SIGN_NAMES[(asc_sign + n - 1) % 12]}
        for n in range(1, 13)
    ]
    moon_lon = next(lon for name, lon, _ in bodies if name == "Moon")
    signs = {p["name"]: SIGN_NAMES.index(p["sign"]) for p in planets}

    return {
        "system": "sidereal",
        "ayanamsa": round(ayanamsa, 4),
        "julian_day": chart.julian_day,
        "ascendant": round(ascendant, 4),
        "midheaven": round(normalize(chart.midheaven - ayanamsa), 4),
        "planets": planets,
        "houses": houses,
        "nakshatras": nakshatras,
        "dashas": vimshottari_dashas(moon_lon, birth_date),
        "yogas": detect_yogas(signs),
    }
