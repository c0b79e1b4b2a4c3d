# src/rendering/base_pdf_renderer.py - v1
"""Abstract PDF renderer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel


class PdfOptions(BaseModel):
    """Per-document rendering options."""

    filename: str
    title: str = ""
    theme: str = "light"


class BasePdfRenderer(ABC):
    """Converts a rendered HTML report into a PDF artifact.

    ``render`` returns an artifact reference (a path or URL) and raises
    PdfRenderError on failure; the pipeline then keeps the HTML-only result.
    """

    @abstractmethod
    async def render(self, html: str, options: PdfOptions) -> str:
        """Render ``html`` and return a reference to the produced PDF."""
