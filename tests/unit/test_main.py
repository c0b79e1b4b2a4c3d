# tests/unit/test_main.py - v2
"""Tests for main.py - CLI entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from astroreport.main import _build_parser, main

BIRTH_ARGS = ["--date", "1990-06-15", "--time", "14:30", "--lat", "40.7128", "--lon", "-74.006"]


class TestBuildParser:
    def test_version_flag(self):
        with pytest.raises(SystemExit) as exc_info:
            _build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_generate_defaults(self):
        args = _build_parser().parse_args(["generate", *BIRTH_ARGS])
        assert args.command == "generate"
        assert args.kind == "western"
        assert args.detail == "detailed"
        assert args.tz == "UTC"
        assert args.pdf is False
        assert str(args.date) == "1990-06-15"

    def test_generate_rejects_unknown_kind(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["generate", *BIRTH_ARGS, "-k", "mayan"])

    def test_batch_subcommand(self):
        args = _build_parser().parse_args(["batch", "requests.json", "-o", "/tmp/out"])
        assert args.requests == Path("requests.json")
        assert args.output == Path("/tmp/out")

    def test_compare_subcommand(self):
        args = _build_parser().parse_args(["compare", "a.json", "b.json", "-f", "html"])
        assert args.reports == [Path("a.json"), Path("b.json")]
        assert args.fmt == "html"


class TestMain:
    def test_no_command(self):
        assert main([]) == 1

    def test_generate_writes_outputs(self, tmp_path: Path, capsys):
        html_path = tmp_path / "report.html"
        json_path = tmp_path / "report.json"

        code = main([
            "generate", *BIRTH_ARGS, "--name", "Ada", "-k", "vedic",
            "-o", str(html_path), "--json-out", str(json_path),
        ])

        assert code == 0
        assert html_path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")
        document = json.loads(json_path.read_text(encoding="utf-8"))
        assert document["kind"] == "vedic"
        assert "Report complete" in capsys.readouterr().out

    def test_generate_invalid_subject(self):
        assert main(["generate", "--date", "2999-01-01", "--time", "10:00", "--lat", "0", "--lon", "0"]) == 1

    def test_compare_files(self, tmp_path: Path):
        paths = []
        for kind in ("western", "hellenistic"):
            path = tmp_path / f"{kind}.json"
            assert main(["generate", *BIRTH_ARGS, "-k", kind, "--json-out", str(path)]) == 0
            paths.append(str(path))
        out = tmp_path / "comparison.csv"

        assert main(["compare", *paths, "-f", "csv", "-o", str(out)]) == 0
        assert out.read_text(encoding="utf-8").startswith("Field,Similarity,Matches,Differences")

    def test_compare_missing_file(self, tmp_path: Path):
        assert main(["compare", str(tmp_path / "a.json"), str(tmp_path / "b.json")]) == 1

    def test_batch(self, tmp_path: Path, capsys):
        subject = {
            "date": "1990-06-15", "time": "14:30",
            "location": {"latitude": 40.7128, "longitude": -74.006},
        }
        requests = tmp_path / "requests.json"
        requests.write_text(json.dumps([
            {"subject": subject, "kind": "western"},
            {"subject": {**subject, "time": None}, "kind": "chinese"},
        ]), encoding="utf-8")
        out_dir = tmp_path / "out"

        assert main(["batch", str(requests), "-o", str(out_dir)]) == 2
        assert len(list(out_dir.glob("*.json"))) == 1
        output = capsys.readouterr().out
        assert "1 of 2 succeeded" in output
        assert "#1: VALIDATION_ERROR" in output

    def test_batch_missing_file(self, tmp_path: Path):
        assert main(["batch", str(tmp_path / "nope.json")]) == 1
