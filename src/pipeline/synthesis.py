# src/pipeline/synthesis.py - v1
"""Analysis stage: turn a calculation document into summary and sections.

Each kind has a fixed, ordered set of section keys (SECTION_KEYS). The
detail level controls depth: ``basic`` keeps the personal points and no
interpretation, ``detailed`` adds interpretation for the key points and
``comprehensive`` interprets every row.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Callable

from astroreport.core.errors import ComposeError
from astroreport.core.models import (
    BirthSubject,
    DetailLevel,
    GenerationConfig,
    ReportContent,
    ReportKind,
    ReportSection,
    Subject,
    SubjectPair,
)
from astroreport.ephemeris.zodiac import SIGN_ELEMENTS, SIGN_NAMES, sign_of

logger = logging.getLogger(__name__)

STAGE = "analysis"

SECTION_KEYS: dict[ReportKind, tuple[str, ...]] = {
    ReportKind.WESTERN: ("planets", "houses", "aspects"),
    ReportKind.VEDIC: ("planets", "nakshatras", "dashas", "yogas"),
    ReportKind.CHINESE: ("pillars", "elements", "animals"),
    ReportKind.HELLENISTIC: ("sect", "lots", "rulers", "planets"),
    ReportKind.TRANSIT: ("natal", "transits", "highlights"),
    ReportKind.COMPATIBILITY: ("synastry", "composite", "categories"),
}

KIND_TITLES: dict[ReportKind, str] = {
    ReportKind.WESTERN: "Western Natal Report",
    ReportKind.VEDIC: "Vedic Birth Chart Report",
    ReportKind.CHINESE: "Chinese Four Pillars Report",
    ReportKind.HELLENISTIC: "Hellenistic Natal Report",
    ReportKind.TRANSIT: "Transit Forecast",
    ReportKind.COMPATIBILITY: "Compatibility Report",
}

BASIC_BODIES = frozenset({"Sun", "Moon", "Mercury", "Venus", "Mars"})
KEY_BODIES = frozenset({"Sun", "Moon"})
BASIC_HOUSES = frozenset({1, 4, 7, 10})
BASIC_ASPECT_LIMIT = 5
BASIC_TRANSIT_LIMIT = 5

PLANET_THEMES: dict[str, str] = {
    "Sun": "core identity and vitality",
    "Moon": "emotional needs and instincts",
    "Mercury": "thinking and communication",
    "Venus": "affection and personal values",
    "Mars": "drive and assertion",
    "Jupiter": "growth and belief",
    "Saturn": "discipline and responsibility",
    "Uranus": "independence and change",
    "Neptune": "imagination and ideals",
    "Pluto": "transformation and power",
    "North Node": "the direction of growth",
    "Rahu": "worldly desire",
    "Ketu": "detachment and past mastery",
}

SIGN_STYLES: dict[str, str] = {
    "Aries": "directly and with initiative",
    "Taurus": "steadily and with patience",
    "Gemini": "curiously and with versatility",
    "Cancer": "protectively and with feeling",
    "Leo": "warmly and with confidence",
    "Virgo": "carefully and with precision",
    "Libra": "diplomatically and with balance",
    "Scorpio": "intensely and with depth",
    "Sagittarius": "expansively and with optimism",
    "Capricorn": "ambitiously and with structure",
    "Aquarius": "inventively and with detachment",
    "Pisces": "intuitively and with compassion",
}

HOUSE_AREAS: dict[int, str] = {
    1: "self-presentation", 2: "resources and self-worth", 3: "learning and siblings",
    4: "home and roots", 5: "creativity and romance", 6: "work and health",
    7: "partnership", 8: "shared resources and crisis", 9: "travel and philosophy",
    10: "career and reputation", 11: "friends and aspirations", 12: "solitude and the unconscious",
}

ASPECT_VERBS: dict[str, str] = {
    "conjunction": "merges",
    "sextile": "supports",
    "square": "challenges",
    "trine": "flows easily with",
    "opposition": "pulls against",
}

ELEMENT_NOTES: dict[str, str] = {
    "Wood": "growth and flexibility",
    "Fire": "expression and enthusiasm",
    "Earth": "stability and care",
    "Metal": "clarity and resolve",
    "Water": "wisdom and adaptability",
}

Composer = Callable[["_Composition"], tuple[str, dict[str, ReportSection]]]


class _Composition:
    """Inputs shared by the per-kind composers."""

    def __init__(self, kind: ReportKind, subject: Subject, calc: dict[str, Any],
                 config: GenerationConfig) -> None:
        self.kind = kind
        self.subject = subject
        self.calc = calc
        self.detail = config.detail_level

    @property
    def basic(self) -> bool:
        return self.detail is DetailLevel.BASIC

    @property
    def comprehensive(self) -> bool:
        return self.detail is DetailLevel.COMPREHENSIVE

    def interpret(self, name: str) -> bool:
        """Whether a row about ``name`` gets an interpretation paragraph."""
        if self.basic:
            return False
        return self.comprehensive or name in KEY_BODIES


def subject_name(subject: Subject) -> str:
    if isinstance(subject, SubjectPair):
        return f"{subject_name(subject.primary)} & {subject_name(subject.partner)}"
    return subject.name or "Subject"


def _planet_sentence(planet: dict[str, Any]) -> str:
    name = planet["name"]
    theme = PLANET_THEMES.get(name, "this point")
    style = SIGN_STYLES.get(planet["sign"], "")
    text = f"{name} in {planet['sign']} expresses {theme} {style}".rstrip()
    house = planet.get("house")
    if house:
        text += f", focused on {HOUSE_AREAS[house]} (house {house})"
    if planet.get("retrograde") and name not in ("North Node", "Rahu", "Ketu"):
        text += "; retrograde, so the energy turns inward"
    return text + "."


def _fmt_deg(degree: float) -> str:
    return f"{degree:.2f}°"


def _planet_rows(comp: _Composition, planets: list[dict[str, Any]]) -> ReportSection:
    rows: list[list[str]] = []
    paragraphs: list[str] = []
    for planet in planets:
        if comp.basic and planet["name"] not in BASIC_BODIES:
            continue
        rows.append([
            planet["name"],
            planet["sign"],
            _fmt_deg(planet["degree"]),
            str(planet.get("house", "")),
            "R" if planet.get("retrograde") else "",
        ])
        if comp.interpret(planet["name"]):
            paragraphs.append(_planet_sentence(planet))
    return ReportSection(
        key="planets",
        title="Planetary Positions",
        paragraphs=paragraphs,
        columns=["Planet", "Sign", "Degree", "House", "Motion"],
        rows=rows,
    )


def _dominant_element(planets: list[dict[str, Any]]) -> str:
    counts = Counter(
        SIGN_ELEMENTS[SIGN_NAMES.index(p["sign"])]
        for p in planets if p["name"] in PLANET_THEMES and p["name"] not in ("North Node", "Rahu", "Ketu")
    )
    return max(sorted(counts), key=lambda e: counts[e])


# === Composers ===


def _western(comp: _Composition) -> tuple[str, dict[str, ReportSection]]:
    calc = comp.calc
    planets = calc["planets"]
    by_name = {p["name"]: p for p in planets}
    asc_sign, _ = sign_of(calc["ascendant"])
    name = subject_name(comp.subject)

    summary = (
        f"{name}'s chart places the Sun in {by_name['Sun']['sign']}, the Moon in "
        f"{by_name['Moon']['sign']} and the Ascendant in {asc_sign}."
    )
    if not comp.basic:
        summary += f" The {_dominant_element(planets)} element dominates the chart."

    houses = ReportSection(key="houses", title="Houses", columns=["House", "Sign", "Cusp", "Ruler"])
    for cusp in calc["houses"]:
        if comp.basic and cusp["house"] not in BASIC_HOUSES:
            continue
        houses.rows.append([str(cusp["house"]), cusp["sign"], _fmt_deg(cusp["degree"]), cusp["ruler"]])
        if comp.comprehensive:
            houses.paragraphs.append(
                f"House {cusp['house']} ({HOUSE_AREAS[cusp['house']]}) begins in {cusp['sign']} "
                f"and is ruled by {cusp['ruler']}."
            )

    aspects = ReportSection(key="aspects", title="Aspects", columns=["Aspect", "Orb"])
    listed = calc["aspects"][:BASIC_ASPECT_LIMIT] if comp.basic else calc["aspects"]
    for aspect in listed:
        label = f"{aspect['body_a']} {aspect['aspect']} {aspect['body_b']}"
        aspects.rows.append([label, _fmt_deg(aspect["orb"])])
        if comp.comprehensive or (not comp.basic and aspect["orb"] < 1.0):
            aspects.paragraphs.append(
                f"{aspect['body_a']} {ASPECT_VERBS[aspect['aspect']]} {aspect['body_b']}, "
                f"linking {PLANET_THEMES.get(aspect['body_a'], '')} with "
                f"{PLANET_THEMES.get(aspect['body_b'], '')}."
            )

    return summary, {"planets": _planet_rows(comp, planets), "houses": houses, "aspects": aspects}


def _vedic(comp: _Composition) -> tuple[str, dict[str, ReportSection]]:
    calc = comp.calc
    moon_nak = next(n for n in calc["nakshatras"] if n["planet"] == "Moon")
    first_dasha = calc["dashas"][0]
    asc_sign, _ = sign_of(calc["ascendant"])
    summary = (
        f"Sidereal chart with ayanamsa {calc['ayanamsa']:.2f}° and {asc_sign} lagna. "
        f"The Moon rests in {moon_nak['name']} nakshatra (pada {moon_nak['pada']}), "
        f"so life opens in the {first_dasha['lord']} maha-dasha."
    )

    nakshatras = ReportSection(key="nakshatras", title="Nakshatras", columns=["Planet", "Nakshatra", "Pada", "Lord"])
    for nak in calc["nakshatras"]:
        if comp.basic and nak["planet"] not in KEY_BODIES:
            continue
        nakshatras.rows.append([nak["planet"], nak["name"], str(nak["pada"]), nak["lord"]])
        if comp.interpret(nak["planet"]):
            nakshatras.paragraphs.append(
                f"{nak['planet']} in {nak['name']} takes on the colouring of its lord {nak['lord']}."
            )

    dashas = ReportSection(key="dashas", title="Vimshottari Dashas", columns=["Lord", "Years", "Start", "End"])
    shown = calc["dashas"][:3] if comp.basic else calc["dashas"]
    for period in shown:
        dashas.rows.append([period["lord"], f"{period['years']:.2f}", period["start"], period["end"]])
        if comp.comprehensive:
            dashas.paragraphs.append(
                f"The {period['lord']} period ({period['start']} to {period['end']}) brings "
                f"{PLANET_THEMES.get(period['lord'], 'its themes')} to the foreground."
            )

    yogas = ReportSection(key="yogas", title="Yogas", columns=["Yoga", "Planets"])
    for yoga in calc["yogas"]:
        yogas.rows.append([yoga["name"], ", ".join(yoga["planets"])])
        if not comp.basic:
            yogas.paragraphs.append(f"{yoga['name']} yoga: {yoga['description']}.")
    if not calc["yogas"]:
        yogas.paragraphs.append("No classical yogas among those checked are formed.")

    return summary, {
        "planets": _planet_rows(comp, calc["planets"]),
        "nakshatras": nakshatras,
        "dashas": dashas,
        "yogas": yogas,
    }


def _chinese(comp: _Composition) -> tuple[str, dict[str, ReportSection]]:
    calc = comp.calc
    master = calc["day_master"]
    year = calc["four_pillars"]["year"]
    summary = (
        f"Day Master {master['polarity']} {master['element']} ({master['stem']}), "
        f"born in the year of the {year['element']} {year['animal']}. "
        f"{calc['dominant_element']} is the dominant element."
    )

    pillars = ReportSection(
        key="pillars", title="Four Pillars",
        columns=["Pillar", "Stem", "Branch", "Element", "Animal"],
    )
    for label in ("year", "month", "day", "hour"):
        pillar = calc["four_pillars"][label]
        pillars.rows.append([
            label.title(), pillar["stem"], pillar["branch"],
            f"{pillar['polarity']} {pillar['element']}", pillar["animal"],
        ])
        if comp.comprehensive or (not comp.basic and label == "day"):
            pillars.paragraphs.append(
                f"The {label} pillar {pillar['stem']}-{pillar['branch']} pairs "
                f"{pillar['element']} over {pillar['branch_element']}."
            )

    elements = ReportSection(key="elements", title="Element Balance", columns=["Element", "Count"])
    for element, count in calc["elements"].items():
        elements.rows.append([element, str(count)])
    if not comp.basic:
        elements.paragraphs.append(
            f"{calc['dominant_element']} brings {ELEMENT_NOTES[calc['dominant_element']]}."
        )
        for missing in calc["missing_elements"]:
            elements.paragraphs.append(
                f"{missing} is absent; cultivating {ELEMENT_NOTES[missing]} restores balance."
            )

    animals = ReportSection(key="animals", title="Animal Signs", columns=["Pillar", "Animal"])
    for label, animal in calc["animals"].items():
        if comp.basic and label != "year":
            continue
        animals.rows.append([label.title(), animal])
    if comp.comprehensive:
        animals.paragraphs.append(
            f"The inner animal of the hour pillar, the {calc['animals']['hour']}, "
            f"shows the private self behind the {calc['animals']['year']} of the year."
        )

    return summary, {"pillars": pillars, "elements": elements, "animals": animals}


def _hellenistic(comp: _Composition) -> tuple[str, dict[str, ReportSection]]:
    calc = comp.calc
    sect = calc["sect"]
    fortune = next(lot for lot in calc["lots"] if lot["name"] == "Fortune")
    summary = (
        f"A {sect['sect']} chart led by the {sect['light']}; the Lot of Fortune falls in "
        f"{fortune['sign']} (house {fortune['house']})."
    )

    sect_section = ReportSection(key="sect", title="Sect", columns=["Role", "Planet"])
    sect_section.rows.extend([
        ["Sect light", sect["light"]],
        ["Benefic of sect", sect["benefic"]],
        ["Malefic of sect", sect["malefic"]],
    ])
    if not comp.basic:
        sect_section.paragraphs.append(
            f"In a {sect['sect']} chart {sect['benefic']} acts most constructively while "
            f"{sect['malefic']} is the more tempered malefic."
        )

    lots = ReportSection(key="lots", title="Lots", columns=["Lot", "Sign", "Degree", "House", "Ruler"])
    for lot in calc["lots"]:
        lots.rows.append([lot["name"], lot["sign"], _fmt_deg(lot["degree"]), str(lot["house"]), lot["ruler"]])
        if not comp.basic:
            lots.paragraphs.append(
                f"The Lot of {lot['name']} in house {lot['house']} points to "
                f"{HOUSE_AREAS[lot['house']]}, governed by {lot['ruler']}."
            )

    rulers = ReportSection(key="rulers", title="House Rulers", columns=["House", "Sign", "Ruler", "Ruler in"])
    for entry in calc["house_rulers"]:
        if comp.basic and entry["house"] not in BASIC_HOUSES:
            continue
        rulers.rows.append([
            str(entry["house"]), entry["sign"], entry["ruler"], str(entry["ruler_house"] or ""),
        ])
        if comp.comprehensive and entry["ruler_house"]:
            rulers.paragraphs.append(
                f"The ruler of house {entry['house']} sits in house {entry['ruler_house']}, tying "
                f"{HOUSE_AREAS[entry['house']]} to {HOUSE_AREAS[entry['ruler_house']]}."
            )

    return summary, {
        "sect": sect_section,
        "lots": lots,
        "rulers": rulers,
        "planets": _planet_rows(comp, calc["planets"]),
    }


def _transit(comp: _Composition) -> tuple[str, dict[str, ReportSection]]:
    calc = comp.calc
    window = calc["window"]
    transits = calc["transits"]
    summary = (
        f"{len(transits)} transit period(s) between {window['start']} and {window['end']} "
        f"for {subject_name(comp.subject)}."
    )

    natal = _planet_rows(comp, calc["planets"])
    natal.key, natal.title = "natal", "Natal Positions"

    table = ReportSection(
        key="transits", title="Transits",
        columns=["Transit", "Start", "End", "Peak", "Orb"],
    )
    listed = transits[:BASIC_TRANSIT_LIMIT] if comp.basic else transits
    for t in listed:
        table.rows.append([
            f"{t['transiting']} {t['aspect']} {t['natal']}",
            t["start"], t["end"], t["peak"], _fmt_deg(t["orb"]),
        ])
        if comp.comprehensive:
            table.paragraphs.append(
                f"Transiting {t['transiting']} {ASPECT_VERBS[t['aspect']]} natal {t['natal']} "
                f"from {t['start']} to {t['end']}, exact around {t['peak']}."
            )

    highlights = ReportSection(key="highlights", title="Highlights")
    tightest = sorted(transits, key=lambda t: t["orb"])[: 1 if comp.basic else 3]
    for t in tightest:
        tone = {True: "supportive", False: "demanding", None: "intensifying"}[t["harmonious"]]
        highlights.paragraphs.append(
            f"A {tone} {t['transiting']}-{t['natal']} {t['aspect']} peaks on {t['peak']}."
        )
    if not transits:
        highlights.paragraphs.append("A quiet period without exact outer-planet contacts.")

    return summary, {"natal": natal, "transits": table, "highlights": highlights}


def _compatibility(comp: _Composition) -> tuple[str, dict[str, ReportSection]]:
    calc = comp.calc
    summary = (
        f"Overall compatibility for {subject_name(comp.subject)} scores "
        f"{calc['score']:.1f}/100 across {len(calc['synastry'])} synastry aspect(s)."
    )

    synastry = ReportSection(key="synastry", title="Synastry", columns=["Aspect", "Orb"])
    listed = calc["synastry"][:BASIC_ASPECT_LIMIT] if comp.basic else calc["synastry"]
    for aspect in listed:
        synastry.rows.append([
            f"{aspect['primary']} {aspect['aspect']} {aspect['partner']}", _fmt_deg(aspect["orb"]),
        ])
        if comp.comprehensive or (not comp.basic and aspect["orb"] < 1.0):
            synastry.paragraphs.append(
                f"Their {aspect['primary']} {ASPECT_VERBS[aspect['aspect']]} the partner's "
                f"{aspect['partner']}."
            )

    composite = ReportSection(key="composite", title="Composite Chart", columns=["Planet", "Sign", "Degree"])
    for point in calc["composite"]:
        if comp.basic and point["name"] not in BASIC_BODIES:
            continue
        composite.rows.append([point["name"], point["sign"], _fmt_deg(point["degree"])])
        if comp.interpret(point["name"]):
            composite.paragraphs.append(
                f"The relationship's {point['name']} in {point['sign']} shares "
                f"{PLANET_THEMES.get(point['name'], 'its themes')} {SIGN_STYLES[point['sign']]}."
            )

    categories = ReportSection(key="categories", title="Compatibility Areas", columns=["Area", "Score"])
    for area, score in calc["categories"].items():
        categories.rows.append([area.title(), f"{score:.1f}"])
    if not comp.basic:
        best = max(calc["categories"], key=lambda a: calc["categories"][a])
        categories.paragraphs.append(f"The strongest connection is {best}.")

    return summary, {"synastry": synastry, "composite": composite, "categories": categories}


COMPOSERS: dict[ReportKind, Composer] = {
    ReportKind.WESTERN: _western,
    ReportKind.VEDIC: _vedic,
    ReportKind.CHINESE: _chinese,
    ReportKind.HELLENISTIC: _hellenistic,
    ReportKind.TRANSIT: _transit,
    ReportKind.COMPATIBILITY: _compatibility,
}


def compose_content(
    kind: ReportKind,
    subject: Subject,
    calculations: dict[str, Any],
    config: GenerationConfig,
) -> ReportContent:
    """Build the summary and ordered sections of a report.

    Raises:
        ComposeError: If the calculation document lacks what the kind needs.
    """
    kind = ReportKind(kind)
    try:
        summary, sections = COMPOSERS[kind](_Composition(kind, subject, calculations, config))
    except (KeyError, IndexError, StopIteration, ValueError) as exc:
        raise ComposeError(f"Cannot compose {kind.value} content: {exc!r}", stage=STAGE) from exc

    wanted = config.sections or SECTION_KEYS[kind]
    ordered = [sections[key] for key in SECTION_KEYS[kind] if key in wanted]
    title = f"{KIND_TITLES[kind]}: {subject_name(subject)}"
    if isinstance(subject, BirthSubject) and subject.date is not None:
        title += f" ({subject.date.isoformat()})"
    logger.debug("Composed %s content with %d section(s)", kind.value, len(ordered))
    return ReportContent(title=title, summary=summary, sections=ordered)
