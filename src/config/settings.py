# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for cache validity, batch limits, progress delivery,
persistence, PDF rendering and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# complete and error are never dropped from a progress queue, so a queue
# must hold both plus at least one intermediate state.
MIN_PROGRESS_QUEUE_SIZE = 3


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Report cache ===
    cache_validity_hours: float = 24.0
    cache_max_entries: int = 0
    cache_sweep_interval_seconds: float = 0.0

    # === Batch generation ===
    batch_max_concurrency: int = 3
    batch_item_timeout_seconds: float = 120.0
    batch_retry_attempts: int = 0
    batch_retry_base_delay_seconds: float = 0.5

    # === Progress delivery ===
    progress_queue_size: int = 32

    # === Validation ===
    birth_year_floor: int = 1900
    transit_max_days: int = 366

    # === Persistence ===
    persistence_backend: Literal["memory", "json"] = "memory"
    persistence_root: Path = Path("~/.astroreport/reports")

    # === PDF rendering ===
    pdf_renderer: Literal["none", "reportlab"] = "reportlab"
    pdf_output_dir: Path = Path("~/.astroreport/pdf")
    pdf_page_size: Literal["A4", "LETTER"] = "A4"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_validity_hours", "batch_item_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float, info) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator(
        "cache_max_entries",
        "cache_sweep_interval_seconds",
        "batch_retry_attempts",
        "batch_retry_base_delay_seconds",
    )
    @classmethod
    def validate_non_negative(cls, v: float, info) -> float:  # noqa: N805
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.batch_max_concurrency < 1:
            errors.append("BATCH_MAX_CONCURRENCY must be >= 1")

        if self.progress_queue_size < MIN_PROGRESS_QUEUE_SIZE:
            errors.append(
                f"PROGRESS_QUEUE_SIZE must be >= {MIN_PROGRESS_QUEUE_SIZE}"
            )

        if self.transit_max_days < 1:
            errors.append("TRANSIT_MAX_DAYS must be >= 1")

        if not 1 <= self.birth_year_floor <= 9999:
            errors.append("BIRTH_YEAR_FLOOR must be a valid calendar year")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_validity_seconds(self) -> float:
        return self.cache_validity_hours * 3600.0


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
