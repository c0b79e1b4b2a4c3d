# src/rendering/reportlab_renderer.py - v1
"""PDF rendering with reportlab's platypus layout engine.

The report HTML is reduced to headings, paragraphs and tables by a small
HTMLParser subclass; reportlab then lays those blocks out page by page.
Rendering is blocking, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import re
from html.parser import HTMLParser
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from astroreport.core.errors import PdfRenderError
from astroreport.rendering.base_pdf_renderer import BasePdfRenderer, PdfOptions

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}
ACCENTS = {"light": "#4b3f72", "dark": "#33334a", "mystical": "#4a2f73"}

_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")


class _Block:
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.text: list[str] = []
        self.rows: list[list[str]] = []


class _ReportHtmlParser(HTMLParser):
    """Collect h1/h2/p blocks and table rows, skipping style and svg content."""

    _TEXT_TAGS = {"h1", "h2", "h3", "p", "li"}
    _SKIP_TAGS = {"style", "svg", "script", "title"}

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.blocks: list[_Block] = []
        self._current: _Block | None = None
        self._table: _Block | None = None
        self._row: list[str] | None = None
        self._cell: list[str] | None = None
        self._skip = 0

    def handle_starttag(self, tag: str, attrs) -> None:
        if tag in self._SKIP_TAGS:
            self._skip += 1
        elif tag == "table":
            self._table = _Block("table")
        elif tag == "tr" and self._table is not None:
            self._row = []
        elif tag in ("td", "th") and self._row is not None:
            self._cell = []
        elif tag in self._TEXT_TAGS and self._table is None:
            self._current = _Block(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag in self._SKIP_TAGS:
            self._skip = max(0, self._skip - 1)
        elif tag in ("td", "th") and self._cell is not None and self._row is not None:
            self._row.append(" ".join("".join(self._cell).split()))
            self._cell = None
        elif tag == "tr" and self._row is not None and self._table is not None:
            self._table.rows.append(self._row)
            self._row = None
        elif tag == "table" and self._table is not None:
            self.blocks.append(self._table)
            self._table = None
        elif self._current is not None and tag == self._current.kind:
            self.blocks.append(self._current)
            self._current = None

    def handle_data(self, data: str) -> None:
        if self._skip:
            return
        if self._cell is not None:
            self._cell.append(data)
        elif self._current is not None:
            self._current.text.append(data)


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class ReportLabPdfRenderer(BasePdfRenderer):
    """Writes one PDF per report under ``output_dir``."""

    def __init__(self, output_dir: Path | str, page_size: str = "A4") -> None:
        self._output_dir = Path(output_dir).expanduser()
        if page_size not in PAGE_SIZES:
            raise ValueError(f"Unsupported page size: {page_size!r}")
        self._page_size = PAGE_SIZES[page_size]

    async def render(self, html: str, options: PdfOptions) -> str:
        try:
            path = await asyncio.to_thread(self._render_sync, html, options)
        except PdfRenderError:
            raise
        except Exception as exc:
            raise PdfRenderError(f"PDF rendering failed: {exc}", stage="formatting") from exc
        logger.info("Rendered PDF %s", path)
        return str(path)

    def _render_sync(self, html: str, options: PdfOptions) -> Path:
        parser = _ReportHtmlParser()
        parser.feed(html)
        parser.close()
        if not parser.blocks:
            raise PdfRenderError("Report HTML has no renderable content", stage="formatting")

        self._output_dir.mkdir(parents=True, exist_ok=True)
        stem = _SAFE_NAME_RE.sub("_", options.filename).strip("._") or "report"
        path = self._output_dir / f"{stem}.pdf"

        styles = getSampleStyleSheet()
        style_for = {
            "h1": styles["Title"],
            "h2": styles["Heading2"],
            "h3": styles["Heading3"],
            "p": styles["BodyText"],
            "li": styles["BodyText"],
        }
        accent = colors.HexColor(ACCENTS.get(options.theme, ACCENTS["light"]))

        story: list = []
        for block in parser.blocks:
            if block.kind == "table":
                if not block.rows:
                    continue
                table = Table(block.rows, repeatRows=1)
                table.setStyle(TableStyle([
                    ("BACKGROUND", (0, 0), (-1, 0), accent),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ]))
                story.append(table)
                story.append(Spacer(1, 8))
                continue
            text = " ".join("".join(block.text).split())
            if text:
                story.append(Paragraph(_escape(text), style_for[block.kind]))

        doc = SimpleDocTemplate(
            str(path),
            pagesize=self._page_size,
            title=options.title or stem,
            leftMargin=48,
            rightMargin=48,
            topMargin=36,
            bottomMargin=36,
        )
        doc.build(story)
        return path
