# src/rendering/html.py - v1
"""HTML rendering of reports and comparisons with jinja2 templates.

Templates live next to this module under templates/. Autoescaping is on
for every template; the only pre-rendered markup is the chart wheel SVG,
which is built from numbers and passed as Markup.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from astroreport.core.models import GenerationConfig, ReportContent, ReportKind

TEMPLATE_DIR = Path(__file__).parent / "templates"

THEMES: dict[str, dict[str, str]] = {
    "light": {
        "background": "#ffffff", "text": "#222222", "accent": "#4b3f72",
        "rule": "#dddddd", "muted": "#777777",
    },
    "dark": {
        "background": "#14141c", "text": "#e6e6ee", "accent": "#b8a8ff",
        "rule": "#33334a", "muted": "#9a9ab0",
    },
    "mystical": {
        "background": "#1d1033", "text": "#f1e9ff", "accent": "#f5c76b",
        "rule": "#4a2f73", "muted": "#bca6dd",
    },
}

# Glyph-free abbreviations keep the SVG readable in every font.
BODY_LABELS: dict[str, str] = {
    "Sun": "Su", "Moon": "Mo", "Mercury": "Me", "Venus": "Ve", "Mars": "Ma",
    "Jupiter": "Ju", "Saturn": "Sa", "Uranus": "Ur", "Neptune": "Ne",
    "Pluto": "Pl", "North Node": "NN", "Rahu": "Ra", "Ketu": "Ke",
}

_TAG_RE = re.compile(r"<[^>]+>")
_HIDDEN_BLOCK_RE = re.compile(r"<(style|svg|script)\b.*?</\1>", re.IGNORECASE | re.DOTALL)


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html", "j2"), default=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def chart_wheel_svg(planets: list[dict[str, Any]], ascendant: float, size: int = 320) -> Markup:
    """Zodiac wheel with the ascendant on the left and bodies on the inner ring."""
    center = size / 2
    outer, inner, ring = center - 10, center - 40, center - 62

    def point(longitude: float, radius: float) -> tuple[float, float]:
        # Counter-clockwise from the ascendant at 9 o'clock.
        angle = math.radians(180.0 + (longitude - ascendant))
        return round(center + radius * math.cos(angle), 2), round(center - radius * math.sin(angle), 2)

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" '
        f'viewBox="0 0 {size} {size}" role="img" aria-label="Chart wheel">',
        f'<circle cx="{center}" cy="{center}" r="{outer}" fill="none" stroke="currentColor"/>',
        f'<circle cx="{center}" cy="{center}" r="{inner}" fill="none" stroke="currentColor"/>',
    ]
    for sign in range(12):
        x1, y1 = point(sign * 30.0, inner)
        x2, y2 = point(sign * 30.0, outer)
        parts.append(f'<line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" stroke="currentColor"/>')
    for planet in planets:
        x, y = point(float(planet["longitude"]), ring)
        label = BODY_LABELS.get(planet["name"], planet["name"][:2])
        parts.append(
            f'<text x="{x}" y="{y}" font-size="11" text-anchor="middle" '
            f'fill="currentColor">{label}</text>'
        )
    parts.append("</svg>")
    return Markup("".join(parts))


def render_report_html(
    content: ReportContent,
    kind: ReportKind,
    config: GenerationConfig,
    calculations: dict[str, Any],
    generated_at: datetime,
) -> str:
    chart_svg = None
    if config.include_charts and "planets" in calculations and "ascendant" in calculations:
        chart_svg = chart_wheel_svg(calculations["planets"], float(calculations["ascendant"]))

    template = get_environment().get_template("report.html.j2")
    return template.render(
        content=content,
        kind=ReportKind(kind).value,
        theme=THEMES[config.theme],
        theme_name=config.theme,
        chart_svg=chart_svg,
        detail_level=config.detail_level.value,
        generated_at=generated_at.isoformat(timespec="seconds"),
    )


def visible_text(html: str) -> str:
    """Text content of an HTML document without styles, scripts or SVG."""
    return _TAG_RE.sub(" ", _HIDDEN_BLOCK_RE.sub(" ", html))


def count_words(html: str) -> int:
    return len(visible_text(html).split())
