# tests/unit/pipeline/systems/test_unit_chinese.py - v1
"""Tests for pipeline/systems/chinese.py - Four Pillars."""

from __future__ import annotations

import datetime as dt

from astroreport.pipeline.systems.chinese import (
    day_pillar,
    four_pillars,
    hour_pillar,
    julian_day_number,
    month_pillar,
    solar_year,
    year_pillar,
)


class TestCalendar:
    def test_julian_day_number(self):
        assert julian_day_number(dt.date(2000, 1, 1)) == 2451545

    def test_solar_year_before_li_chun(self):
        assert solar_year(dt.date(1984, 1, 15), 295.0) == 1983

    def test_solar_year_after_li_chun(self):
        assert solar_year(dt.date(1984, 2, 10), 321.0) == 1984
        assert solar_year(dt.date(1984, 7, 1), 100.0) == 1984


class TestPillars:
    def test_year_1984(self):
        pillar = year_pillar(1984)
        assert (pillar["stem"], pillar["branch"], pillar["animal"]) == ("Jia", "Zi", "Rat")

    def test_year_1983(self):
        pillar = year_pillar(1983)
        assert (pillar["stem"], pillar["branch"], pillar["animal"]) == ("Gui", "Hai", "Pig")

    def test_reference_day(self):
        pillar = day_pillar(dt.date(1949, 10, 1))
        assert (pillar["stem"], pillar["branch"]) == ("Jia", "Zi")

    def test_day_cycle(self):
        assert day_pillar(dt.date(1949, 10, 1)) == day_pillar(dt.date(1949, 11, 30))

    def test_hour(self):
        pillar = hour_pillar(dt.date(1949, 10, 1), 12)
        assert (pillar["stem"], pillar["branch"], pillar["animal"]) == ("Geng", "Wu", "Horse")

    def test_late_hour_is_rat(self):
        assert hour_pillar(dt.date(1949, 10, 1), 23)["branch"] == "Zi"

    def test_first_month_of_jia_year(self):
        pillar = month_pillar(1984, 316.0)
        assert (pillar["stem"], pillar["branch"]) == ("Bing", "Yin")


class TestFourPillars:
    def test_document(self):
        doc = four_pillars(dt.date(1984, 1, 15), dt.time(8, 0), 295.0)
        assert doc["system"] == "bazi"
        assert doc["solar_year"] == 1983
        assert doc["animals"]["year"] == "Pig"
        assert sum(doc["elements"].values()) == 8
        assert doc["day_master"]["stem"] == doc["four_pillars"]["day"]["stem"]
        assert doc["dominant_element"] in doc["elements"]
        assert all(doc["elements"][e] == 0 for e in doc["missing_elements"])
