# src/main.py - v2
"""CLI entry point: generate, batch, compare commands.

Usage:
    astroreport generate --date 1990-06-15 --time 14:30 --lat 40.71 --lon -74.0 [options]
    astroreport batch <requests.json> [options]
    astroreport compare <report.json> <report.json> [...] [options]
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import json
import logging
import sys
from pathlib import Path

from astroreport.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="astroreport",
        description=f"astroreport v{__version__} - astrological report generation and comparison",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- generate ---
    p_generate = subparsers.add_parser(
        "generate", help="Generate a single report",
    )
    p_generate.add_argument("--date", required=True, type=dt.date.fromisoformat, help="Birth date (YYYY-MM-DD)")
    p_generate.add_argument("--time", required=True, type=dt.time.fromisoformat, help="Birth time (HH:MM)")
    p_generate.add_argument("--lat", required=True, type=float, help="Latitude in degrees")
    p_generate.add_argument("--lon", required=True, type=float, help="Longitude in degrees")
    p_generate.add_argument("--tz", default="UTC", help="IANA timezone (default: UTC)")
    p_generate.add_argument("--place", default="", help="Place name")
    p_generate.add_argument("--name", default=None, help="Subject display name")
    p_generate.add_argument(
        "-k", "--kind", default="western",
        choices=["western", "vedic", "chinese", "hellenistic", "transit"],
        help="Report kind (default: western)",
    )
    p_generate.add_argument(
        "-d", "--detail", default="detailed",
        choices=["basic", "detailed", "comprehensive"],
        help="Detail level (default: detailed)",
    )
    p_generate.add_argument(
        "--theme", default="light", choices=["light", "dark", "mystical"],
    )
    p_generate.add_argument("--no-charts", action="store_true", help="Omit the chart wheel")
    p_generate.add_argument("--pdf", action="store_true", help="Also render a PDF")
    p_generate.add_argument("--transit-days", type=int, default=30, help="Transit window length")
    p_generate.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the HTML report to this file",
    )
    p_generate.add_argument(
        "--json-out", type=Path, default=None,
        help="Write the full report as JSON (input for 'compare')",
    )
    p_generate.set_defaults(func=_cmd_generate)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Generate every request of a JSON file",
    )
    p_batch.add_argument(
        "requests", type=Path,
        help="JSON list of {subject, kind, config} objects",
    )
    p_batch.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Directory receiving one JSON file per successful report",
    )
    p_batch.set_defaults(func=_cmd_batch)

    # --- compare ---
    p_compare = subparsers.add_parser(
        "compare", help="Compare previously generated reports",
    )
    p_compare.add_argument("reports", type=Path, nargs="+", help="Report JSON files")
    p_compare.add_argument("--name", default="Report comparison", help="Comparison name")
    p_compare.add_argument(
        "-f", "--format", dest="fmt", default="json", choices=["json", "csv", "html"],
    )
    p_compare.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output file (default: stdout)",
    )
    p_compare.set_defaults(func=_cmd_compare)

    return parser


async def _cmd_generate(args: argparse.Namespace) -> int:
    """Generate one report and print a summary."""
    from astroreport.api.facade import create_service
    from astroreport.core.errors import ReportError
    from astroreport.core.models import BirthLocation, BirthSubject, GenerationConfig

    subject = BirthSubject(
        date=args.date,
        time=args.time,
        location=BirthLocation(name=args.place, latitude=args.lat, longitude=args.lon, timezone=args.tz),
        name=args.name,
    )
    config = GenerationConfig(
        detail_level=args.detail,
        include_charts=not args.no_charts,
        include_pdf=args.pdf,
        theme=args.theme,
        transit_days=args.transit_days,
    )

    async with create_service() as service:
        try:
            report = await service.generate(subject, args.kind, config, on_progress=_print_progress)
        except ReportError as exc:
            logger.error("Generation failed: %s", exc)
            return 1

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(report.outputs.html, encoding="utf-8")
    if args.json_out is not None:
        args.json_out.parent.mkdir(parents=True, exist_ok=True)
        args.json_out.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    _print_report_summary(report)
    return 0


async def _cmd_batch(args: argparse.Namespace) -> int:
    """Generate a batch from a JSON request file."""
    from pydantic import TypeAdapter

    from astroreport.api.facade import create_service
    from astroreport.batch.models import BatchRequest

    requests_path: Path = args.requests
    if not requests_path.is_file():
        logger.error("File not found: %s", requests_path)
        return 1

    requests = TypeAdapter(list[BatchRequest]).validate_json(
        requests_path.read_text(encoding="utf-8")
    )

    async with create_service() as service:
        result = await service.generate_batch(requests)

    if args.output is not None:
        args.output.mkdir(parents=True, exist_ok=True)
        for report in result.reports:
            (args.output / f"{report.id}.json").write_text(
                report.model_dump_json(indent=2), encoding="utf-8",
            )

    print(f"\nBatch {result.batch_id} complete: {result.summary}")
    for item in result.items:
        if item.error is not None:
            print(f"  #{item.index}: {item.error.code} - {item.error.message}")
        else:
            print(f"  #{item.index}: {item.report.id}")
    print(f"  Duration: {result.duration_seconds:.1f}s")
    return 0 if result.failed == 0 else 2


async def _cmd_compare(args: argparse.Namespace) -> int:
    """Compare report JSON files and export the result."""
    from astroreport.api.facade import ReportService
    from astroreport.core.models import GeneratedReport

    reports: list[GeneratedReport] = []
    for path in args.reports:
        if not path.is_file():
            logger.error("File not found: %s", path)
            return 1
        reports.append(GeneratedReport.model_validate(json.loads(path.read_text(encoding="utf-8"))))

    service = ReportService()
    comparison = service.create_comparison(args.name, reports)
    result = service.compare(reports, comparison.settings)
    artifact = service.export_comparison(comparison, result, args.fmt)

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(artifact.content)
        print(f"Overall similarity: {result.overall_similarity:.1%} -> {args.output}")
    else:
        sys.stdout.write(artifact.content.decode("utf-8"))
    return 0


def _print_progress(state: object) -> None:
    logger.info("[%3.0f%%] %s %s", state.percentage, state.stage.value, state.message or "")


def _print_report_summary(report: object) -> None:
    """Print a human-readable summary of a GeneratedReport."""
    meta = report.metadata
    print(f"\nReport complete:")
    print(f"  Report ID:  {report.id}")
    print(f"  Title:      {report.content.title}")
    print(f"  Sections:   {meta.section_count}")
    print(f"  Words:      {meta.word_count}")
    if report.outputs.pdf:
        print(f"  PDF:        {report.outputs.pdf}")
    for warning in meta.warnings:
        print(f"  Warning:    {warning}")
    preview = report.content.summary[:200]
    if len(report.content.summary) > 200:
        preview += "..."
    print(f"  Summary:    {preview}")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from astroreport.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_format="text",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
