# src/ephemeris/models.py - v1
"""Ephemeris output models: PlanetPosition, HouseCusp, Aspect, ChartCalculation."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PlanetPosition(BaseModel):
    name: str
    longitude: float
    sign: str
    degree: float
    house: int
    retrograde: bool = False
    speed: float = 0.0


class HouseCusp(BaseModel):
    house: int
    longitude: float
    sign: str
    degree: float
    ruler: str


class Aspect(BaseModel):
    """Angular relationship between two bodies, within orb."""

    body_a: str
    body_b: str
    aspect: str
    angle: float
    orb: float
    harmonious: bool | None = None

    @property
    def is_exact(self) -> bool:
        return self.orb < 1.0


class ChartCalculation(BaseModel):
    """Raw positional output of an ephemeris calculator for one moment and place."""

    julian_day: float
    system: str = "tropical"
    ascendant: float
    midheaven: float
    planets: list[PlanetPosition] = Field(default_factory=list)
    houses: list[HouseCusp] = Field(default_factory=list)
    aspects: list[Aspect] = Field(default_factory=list)

    def planet(self, name: str) -> PlanetPosition:
        for p in self.planets:
            if p.name == name:
                return p
        raise KeyError(name)
