# src/pipeline/systems/chinese.py - v1
"""Four Pillars (BaZi) from the civil date, birth hour and solar longitude."""

from __future__ import annotations

import datetime as dt
from collections import Counter
from typing import Any

STEMS: tuple[str, ...] = (
    "Jia", "Yi", "Bing", "Ding", "Wu", "Ji", "Geng", "Xin", "Ren", "Gui",
)
BRANCHES: tuple[str, ...] = (
    "Zi", "Chou", "Yin", "Mao", "Chen", "Si", "Wu", "Wei", "Shen", "You", "Xu", "Hai",
)
ANIMALS: tuple[str, ...] = (
    "Rat", "Ox", "Tiger", "Rabbit", "Dragon", "Snake",
    "Horse", "Goat", "Monkey", "Rooster", "Dog", "Pig",
)
ELEMENTS: tuple[str, ...] = ("Wood", "Fire", "Earth", "Metal", "Water")
BRANCH_ELEMENTS: tuple[str, ...] = (
    "Water", "Earth", "Wood", "Wood", "Earth", "Fire",
    "Fire", "Earth", "Metal", "Metal", "Earth", "Water",
)

# Li Chun (start of spring) is reached when the Sun enters 315 degrees.
LI_CHUN_LONGITUDE = 315.0

# JDN of 1949-10-01, a Jia-Zi day; the day cycle is counted from it.
_JIA_ZI_JDN = 2433191


def julian_day_number(day: dt.date) -> int:
    """Gregorian calendar date to Julian Day Number."""
    a = (14 - day.month) // 12
    y = day.year + 4800 - a
    m = day.month + 12 * a - 3
    return (
        day.day + (153 * m + 2) // 5 + 365 * y
        + y // 4 - y // 100 + y // 400 - 32045
    )


def _pillar(stem: int, branch: int) -> dict[str, Any]:
    return {
        "stem": STEMS[stem],
        "branch": BRANCHES[branch],
        "element": ELEMENTS[stem // 2],
        "polarity": "Yang" if stem % 2 == 0 else "Yin",
        "animal": ANIMALS[branch],
        "branch_element": BRANCH_ELEMENTS[branch],
    }


def solar_year(day: dt.date, sun_longitude: float) -> int:
    """Chinese solar year; January and early February before Li Chun count to the previous year."""
    if day.month <= 2 and 270.0 <= sun_longitude < LI_CHUN_LONGITUDE:
        return day.year - 1
    return day.year


def year_pillar(year: int) -> dict[str, Any]:
    return _pillar((year - 4) % 10, (year - 4) % 12)


def month_pillar(year: int, sun_longitude: float) -> dict[str, Any]:
    """Solar month counted from Li Chun (Tiger month) with the Five Tigers stem rule."""
    month = int(((sun_longitude - LI_CHUN_LONGITUDE) % 360.0) // 30.0)
    year_stem = (year - 4) % 10
    stem = ((year_stem % 5) * 2 + 2 + month) % 10
    return _pillar(stem, (2 + month) % 12)


def day_pillar(day: dt.date) -> dict[str, Any]:
    index = (julian_day_number(day) - _JIA_ZI_JDN) % 60
    return _pillar(index % 10, index % 12)


def hour_pillar(day: dt.date, hour: int) -> dict[str, Any]:
    """Double-hour pillar; Zi hour spans 23:00-01:00 (Five Rats stem rule)."""
    branch = ((hour + 1) // 2) % 12
    day_stem = (julian_day_number(day) - _JIA_ZI_JDN) % 60 % 10
    stem = ((day_stem % 5) * 2 + branch) % 10
    return _pillar(stem, branch)


def four_pillars(day: dt.date, time: dt.time, sun_longitude: float) -> dict[str, Any]:
    """Pillars, element balance and animal signs for a birth moment."""
    year = solar_year(day, sun_longitude)
    pillars = {
        "year": year_pillar(year),
        "month": month_pillar(year, sun_longitude),
        "day": day_pillar(day),
        "hour": hour_pillar(day, time.hour),
    }

    balance: Counter[str] = Counter({element: 0 for element in ELEMENTS})
    for pillar in pillars.values():
        balance[pillar["element"]] += 1
        balance[pillar["branch_element"]] += 1
    dominant = max(ELEMENTS, key=lambda e: (balance[e], -ELEMENTS.index(e)))
    missing = [e for e in ELEMENTS if balance[e] == 0]

    return {
        "system": "bazi",
        "solar_year": year,
        "four_pillars": pillars,
        "day_master": {
            "stem": pillars["day"]["stem"],
            "element": pillars["day"]["element"],
            "polarity": pillars["day"]["polarity"],
        },
        "elements": dict(balance),
        "dominant_element": dominant,
        "missing_elements": missing,
        "animals": {name: pillar["animal"] for name, pillar in pillars.items()},
    }
