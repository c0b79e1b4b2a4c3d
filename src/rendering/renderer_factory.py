# src/rendering/renderer_factory.py - v1
"""Factory for PDF renderer instantiation."""

from __future__ import annotations

from astroreport.config.settings import Settings
from astroreport.rendering.base_pdf_renderer import BasePdfRenderer


def create_pdf_renderer(settings: Settings | None = None) -> BasePdfRenderer | None:
    """Instantiate the configured PDF renderer, or None when disabled.

    Args:
        settings: Application settings. Defaults to reportlab under ~/.astroreport/pdf.
    """
    settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]

    if settings.pdf_renderer == "none":
        return None

    if settings.pdf_renderer == "reportlab":
        from astroreport.rendering.reportlab_renderer import ReportLabPdfRenderer
        return ReportLabPdfRenderer(
            output_dir=settings.pdf_output_dir, page_size=settings.pdf_page_size,
        )

    raise ValueError(f"Unsupported PDF renderer: {settings.pdf_renderer!r}")
