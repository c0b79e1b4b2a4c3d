# src/pipeline/validation.py - v1
"""Validation stage: subject completeness and config structure.

All failures raise ValidationError with a message meant for the end user;
no calculation is attempted on an invalid request.
"""

from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from astroreport.core.errors import ValidationError
from astroreport.core.models import (
    BirthSubject,
    GenerationConfig,
    ReportKind,
    Subject,
    SubjectPair,
)
from astroreport.pipeline.synthesis import SECTION_KEYS

STAGE = "validation"


def validate_request(
    subject: Subject,
    kind: ReportKind,
    config: GenerationConfig,
    *,
    today: dt.date,
    year_floor: int = 1900,
    transit_max_days: int = 366,
) -> None:
    """Raise ValidationError if the request cannot be generated.

    Args:
        subject: BirthSubject, or SubjectPair for compatibility reports.
        kind: Requested report kind.
        config: Generation config.
        today: Reference date for the not-in-the-future rule.
        year_floor: Earliest accepted birth year.
        transit_max_days: Upper bound of the transit window.
    """
    kind = ReportKind(kind)
    if kind is ReportKind.COMPATIBILITY:
        if not isinstance(subject, SubjectPair):
            raise ValidationError(
                "Compatibility reports require two subjects", stage=STAGE,
            )
        validate_subject(subject.primary, today=today, year_floor=year_floor, role="primary")
        validate_subject(subject.partner, today=today, year_floor=year_floor, role="partner")
    else:
        if not isinstance(subject, BirthSubject):
            raise ValidationError(
                f"{kind.value} reports require a single subject", stage=STAGE,
            )
        validate_subject(subject, today=today, year_floor=year_floor)

    validate_config(config, kind, transit_max_days=transit_max_days)


def validate_subject(
    subject: BirthSubject,
    *,
    today: dt.date,
    year_floor: int = 1900,
    role: str | None = None,
) -> None:
    details = {"role": role} if role else {}
    location = subject.location
    if subject.date is None or subject.time is None or location is None:
        raise ValidationError(
            "Complete birth data is required (date, time, location)",
            stage=STAGE, details=details,
        )

    if location.latitude is None or location.longitude is None \
            or not -90.0 <= location.latitude <= 90.0 \
            or not -180.0 <= location.longitude <= 180.0:
        raise ValidationError(
            "Valid location coordinates are required", stage=STAGE, details=details,
        )

    try:
        ZoneInfo(location.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(
            f"Unknown timezone: {location.timezone!r}",
            stage=STAGE, details=details,
        ) from exc

    if subject.date > today:
        raise ValidationError("Birth date cannot be in the future", stage=STAGE, details=details)

    if subject.date.year < year_floor:
        raise ValidationError(
            f"Birth date must be after {year_floor}", stage=STAGE, details=details,
        )


def validate_config(
    config: GenerationConfig,
    kind: ReportKind,
    *,
    transit_max_days: int = 366,
) -> None:
    if config.persist and not config.owner_id:
        raise ValidationError("Persisting a report requires an owner id", stage=STAGE)

    if kind is ReportKind.TRANSIT and not 1 <= config.transit_days <= transit_max_days:
        raise ValidationError(
            f"Transit window must be between 1 and {transit_max_days} days",
            stage=STAGE,
            details={"transit_days": config.transit_days},
        )

    if config.sections is not None:
        known = SECTION_KEYS[kind]
        unknown = [s for s in config.sections if s not in known]
        if unknown:
            raise ValidationError(
                f"Unknown section(s) for {kind.value} report: {', '.join(unknown)}",
                stage=STAGE,
                details={"unknown": unknown, "available": list(known)},
            )
        if not config.sections:
            raise ValidationError("At least one section must be requested", stage=STAGE)
