# tests/unit/rendering/test_unit_reportlab_renderer.py - v1
"""Tests for rendering/reportlab_renderer.py and renderer_factory.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from astroreport.config.settings import Settings
from astroreport.core.errors import PdfRenderError
from astroreport.rendering.base_pdf_renderer import PdfOptions
from astroreport.rendering.renderer_factory import create_pdf_renderer
from astroreport.rendering.reportlab_renderer import ReportLabPdfRenderer, _ReportHtmlParser

HTML = """<!DOCTYPE html><html><head><title>T</title><style>h1 {}</style></head>
<body><h1>Report</h1><p class="summary">Summary &amp; more.</p>
<svg><text>Su</text></svg>
<section><h2>Planets</h2><p>Sun text.</p>
<table><thead><tr><th>Planet</th><th>Sign</th></tr></thead>
<tbody><tr><td>Sun</td><td>Gemini</td></tr></tbody></table></section>
</body></html>"""


class TestHtmlParser:
    def test_blocks(self):
        parser = _ReportHtmlParser()
        parser.feed(HTML)
        kinds = [b.kind for b in parser.blocks]
        assert kinds == ["h1", "p", "h2", "p", "table"]
        assert "".join(parser.blocks[1].text) == "Summary & more."
        assert parser.blocks[-1].rows == [["Planet", "Sign"], ["Sun", "Gemini"]]


class TestReportLabPdfRenderer:
    @pytest.mark.asyncio
    async def test_writes_pdf(self, tmp_path: Path):
        renderer = ReportLabPdfRenderer(tmp_path / "pdf")
        ref = await renderer.render(HTML, PdfOptions(filename="abc/123", title="Report"))
        path = Path(ref)
        assert path.parent == tmp_path / "pdf"
        assert path.name == "abc_123.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_empty_html_fails(self, tmp_path: Path):
        renderer = ReportLabPdfRenderer(tmp_path)
        with pytest.raises(PdfRenderError, match="no renderable content"):
            await renderer.render("<html><body></body></html>", PdfOptions(filename="x"))

    def test_unknown_page_size(self, tmp_path: Path):
        with pytest.raises(ValueError):
            ReportLabPdfRenderer(tmp_path, page_size="A5")


class TestFactory:
    def test_disabled(self):
        assert create_pdf_renderer(Settings(_env_file=None, pdf_renderer="none")) is None

    def test_reportlab(self, tmp_path: Path):
        settings = Settings(_env_file=None, pdf_renderer="reportlab", pdf_output_dir=tmp_path)
        assert isinstance(create_pdf_renderer(settings), ReportLabPdfRenderer)
