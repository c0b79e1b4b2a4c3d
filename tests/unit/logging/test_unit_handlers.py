# tests/unit/logging/test_unit_handlers.py - v2
"""Tests for logging/handlers.py - console and file rotation handlers."""

from __future__ import annotations

import io

import pytest

from astroreport.logging.handlers import _parse_size, create_console_handler, create_rotating_handler


class TestParseSize:
    def test_mb(self):
        assert _parse_size("10MB") == 10 * 1024 * 1024

    def test_kb(self):
        assert _parse_size("512KB") == 512 * 1024

    def test_decimal(self):
        assert _parse_size("1.5KB") == 1536

    def test_case_insensitive(self):
        assert _parse_size("10mb") == 10 * 1024 * 1024

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid size"):
            _parse_size("10bytes")

    def test_zero(self):
        with pytest.raises(ValueError, match="positive"):
            _parse_size("0MB")


class TestCreateRotatingHandler:
    def test_creates_handler(self, tmp_path):
        handler = create_rotating_handler(tmp_path / "test.log", rotation="1MB", retention=5)
        try:
            assert handler.maxBytes == 1024 * 1024
            assert handler.backupCount == 5
        finally:
            handler.close()

    def test_creates_parent_dirs(self, tmp_path):
        handler = create_rotating_handler(tmp_path / "sub" / "deep" / "test.log")
        handler.close()
        assert (tmp_path / "sub" / "deep").exists()

    def test_negative_retention(self, tmp_path):
        with pytest.raises(ValueError, match="retention"):
            create_rotating_handler(tmp_path / "x.log", retention=-1)


class TestConsoleHandler:
    def test_custom_stream(self):
        stream = io.StringIO()
        handler = create_console_handler(stream)
        assert handler.stream is stream
