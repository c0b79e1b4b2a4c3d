# src/pipeline/systems/synastry.py - v1
"""Compatibility between two charts: synastry aspects, composite and scores."""

from __future__ import annotations

from typing import Any

from astroreport.ephemeris.models import ChartCalculation
from astroreport.ephemeris.zodiac import normalize, match_aspect, sign_of

SYNASTRY_BODIES: tuple[str, ...] = (
    "Sun", "Moon", "Mercury", "Venus", "Mars", "Jupiter", "Saturn", "Neptune",
)
SYNASTRY_ORB_SCALE = 0.75

CATEGORY_BODIES: dict[str, frozenset[str]] = {
    "emotional": frozenset({"Moon", "Venus"}),
    "intellectual": frozenset({"Mercury", "Jupiter"}),
    "physical": frozenset({"Mars", "Venus", "Sun"}),
    "spiritual": frozenset({"Jupiter", "Neptune", "Saturn"}),
}

BASE_SCORE = 50.0
HARMONIOUS_WEIGHT = 10.0
CHALLENGING_WEIGHT = -8.0
CONJUNCTION_WEIGHT = 6.0


def midpoint(a: float, b: float) -> float:
    """Midpoint along the shorter arc."""
    diff = ((b - a + 540.0) % 360.0) - 180.0
    return normalize(a + diff / 2.0)


def synastry_aspects(primary: ChartCalculation, partner: ChartCalculation) -> list[dict[str, Any]]:
    aspects: list[dict[str, Any]] = []
    for a in primary.planets:
        if a.name not in SYNASTRY_BODIES:
            continue
        for b in partner.planets:
            if b.name not in SYNASTRY_BODIES:
                continue
            found = match_aspect(a.longitude, b.longitude, orb_scale=SYNASTRY_ORB_SCALE)
            if found is None:
                continue
            rule, orb = found
            aspects.append({
                "primary": a.name,
                "partner": b.name,
                "aspect": rule.name,
                "orb": round(orb, 3),
                "harmonious": rule.harmonious,
                "strength": round(1.0 - orb / (rule.orb * SYNASTRY_ORB_SCALE), 3),
            })
    aspects.sort(key=lambda x: x["orb"])
    return aspects


def composite_chart(primary: ChartCalculation, partner: ChartCalculation) -> list[dict[str, Any]]:
    partner_by_name = {p.name: p for p in partner.planets}
    composite: list[dict[str, Any]] = []
    for p in primary.planets:
        other = partner_by_name.get(p.name)
        if other is None:
            continue
        lon = midpoint(p.longitude, other.longitude)
        sign, degree = sign_of(lon)
        composite.append({"name": p.name, "longitude": round(lon, 4), "sign": sign, "degree": degree})
    return composite


def category_scores(aspects: list[dict[str, Any]]) -> dict[str, float]:
    """Score each category on 0..100 from the aspects touching its bodies."""
    scores: dict[str, float] = {}
    for category, bodies in CATEGORY_BODIES.items():
        score = BASE_SCORE
        for aspect in aspects:
            if aspect["primary"] not in bodies and aspect["partner"] not in bodies:
                continue
            if aspect["harmonious"] is None:
                weight = CONJUNCTION_WEIGHT
            elif aspect["harmonious"]:
                weight = HARMONIOUS_WEIGHT
            else:
                weight = CHALLENGING_WEIGHT
            score += weight * aspect["strength"]
        scores[category] = round(max(0.0, min(100.0, score)), 1)
    return scores


def compatibility(primary: ChartCalculation, partner: ChartCalculation) -> dict[str, Any]:
    aspects = synastry_aspects(primary, partner)
    categories = category_scores(aspects)
    return {
        "synastry": aspects,
        "composite": composite_chart(primary, partner),
        "categories": categories,
        "score": round(sum(categories.values()) / len(categories), 1),
    }
