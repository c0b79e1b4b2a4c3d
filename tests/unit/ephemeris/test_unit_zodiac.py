# tests/unit/ephemeris/test_unit_zodiac.py - v1
"""Tests for ephemeris/zodiac.py - sign, house and aspect arithmetic."""

from __future__ import annotations

import pytest

from astroreport.ephemeris.models import PlanetPosition
from astroreport.ephemeris.zodiac import (
    angular_distance,
    find_aspects,
    house_of,
    match_aspect,
    normalize,
    sign_of,
    whole_sign_house,
)


def _planet(name: str, lon: float) -> PlanetPosition:
    sign, degree = sign_of(lon)
    return PlanetPosition(name=name, longitude=lon, sign=sign, degree=degree, house=1)


class TestSigns:
    @pytest.mark.parametrize("lon,expected", [
        (0.0, ("Aries", 0.0)),
        (45.5, ("Taurus", 15.5)),
        (359.0, ("Pisces", 29.0)),
        (-30.0, ("Pisces", 0.0)),
        (370.0, ("Aries", 10.0)),
    ])
    def test_sign_of(self, lon, expected):
        assert sign_of(lon) == expected

    def test_normalize(self):
        assert normalize(725.0) == 5.0
        assert normalize(-10.0) == 350.0


class TestDistances:
    def test_shortest_arc(self):
        assert angular_distance(350.0, 10.0) == pytest.approx(20.0)
        assert angular_distance(0.0, 180.0) == pytest.approx(180.0)

    def test_equal_houses(self):
        assert house_of(100.0, 100.0) == 1
        assert house_of(99.0, 100.0) == 12
        assert house_of(190.0, 100.0) == 4

    def test_whole_sign_houses(self):
        # Ascendant in Leo: Leo is the 1st house, Virgo the 2nd, Cancer the 12th.
        assert whole_sign_house(125.0, 121.0) == 1
        assert whole_sign_house(155.0, 121.0) == 2
        assert whole_sign_house(100.0, 121.0) == 12


class TestAspects:
    def test_trine(self):
        rule, orb = match_aspect(10.0, 132.0)
        assert rule.name == "trine"
        assert orb == pytest.approx(2.0)

    def test_outside_orb(self):
        assert match_aspect(0.0, 45.0) is None

    def test_orb_scale(self):
        assert match_aspect(0.0, 97.0) is not None
        assert match_aspect(0.0, 97.0, orb_scale=0.5) is None

    def test_find_aspects_sorted_by_orb(self):
        planets = [_planet("Sun", 0.0), _planet("Moon", 93.0), _planet("Mars", 180.5)]
        aspects = find_aspects(planets)
        assert [a.orb for a in aspects] == sorted(a.orb for a in aspects)
        first = aspects[0]
        assert (first.body_a, first.body_b, first.aspect) == ("Sun", "Mars", "opposition")
        assert first.is_exact
