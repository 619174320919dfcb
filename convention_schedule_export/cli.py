"""
Command-line interface: fetch a convention schedule grid and export it to file.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import requests

from . import __version__
from .errors import EnrichmentError, ScheduleFormatError
from .export import export
from .schedule_fetch import (
    DEFAULT_DESCRIPTION_SELECTOR,
    DEFAULT_SCHEDULE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_WORKERS,
    enrich_events,
    fetch_schedule_html,
)
from .schedule_html import parse_schedule_html


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def _known_row(value: str) -> tuple[str, str]:
    last, sep, sentinel = value.partition("=")
    if not sep or not last.strip() or not sentinel.strip():
        raise argparse.ArgumentTypeError(f"expected LAST=END, e.g. \"1:45 am=2:00 am\": {value!r}")
    return last.strip(), sentinel.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="convention-schedule-export",
        description=(
            "Export a convention schedule grid to ICS / CSV / JSON.\n"
            "- Fetches the schedule page (or reads a saved copy) and turns every merged grid cell into one event."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-o",
        "--output",
        default="convention_schedule",
        help="Output path (without extension). Default: convention_schedule",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["ics", "csv", "json"],
        default="ics",
        help="Export format. Default: ics",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--url",
        default=DEFAULT_SCHEDULE_URL,
        help=f"Schedule page to fetch. Default: {DEFAULT_SCHEDULE_URL}",
    )
    source.add_argument(
        "--html",
        metavar="HTML_PATH",
        help="Use a saved schedule page instead of fetching it.",
    )
    parser.add_argument(
        "--base-url",
        help="Base URL for event links when using --html. Default: the --url value.",
    )
    parser.add_argument(
        "--start-date",
        metavar="YYYY-MM-DD",
        type=_iso_date,
        required=True,
        help="Date of the first schedule table (first convention day). Later tables follow day by day.",
    )
    parser.add_argument(
        "--descriptions",
        action="store_true",
        help="Fetch every event's detail page and add its description.",
    )
    parser.add_argument(
        "--selector",
        default=DEFAULT_DESCRIPTION_SELECTOR,
        help=f"CSS selector of the description on a detail page. Default: {DEFAULT_DESCRIPTION_SELECTOR}",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Parallel detail-page fetches. Default: {DEFAULT_WORKERS}",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"HTTP timeout in seconds. Default: {DEFAULT_TIMEOUT}",
    )
    parser.add_argument(
        "--known-last-row",
        metavar="LAST=END",
        type=_known_row,
        action="append",
        help="Expected last time row and the time it ends, e.g. \"1:45 am=2:00 am\". Repeatable. "
        "When given, any other last row aborts the run (the page layout has changed).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.html:
        html_path = Path(args.html)
        if not html_path.exists():
            print(f"Error: --html not found: {html_path}", file=sys.stderr)
            return 1
        html = html_path.read_text(encoding="utf-8", errors="ignore")
        base_url = args.base_url or args.url
    else:
        try:
            print(f"Fetching schedule page {args.url} ...")
            html = fetch_schedule_html(args.url, timeout=args.timeout)
        except requests.RequestException as e:
            print(f"Error fetching schedule: {e}", file=sys.stderr)
            return 1
        base_url = args.base_url or args.url

    try:
        events = parse_schedule_html(
            html_content=html,
            start_date=args.start_date,
            base_url=base_url,
            known_sentinels=dict(args.known_last_row) if args.known_last_row else None,
        )
    except ScheduleFormatError as e:
        print(f"Error parsing schedule: {e}", file=sys.stderr)
        return 1

    if args.descriptions:
        try:
            events = enrich_events(
                events,
                max_workers=args.workers,
                timeout=args.timeout,
                selector=args.selector,
            )
        except (EnrichmentError, ValueError) as e:
            print(f"Error fetching event details: {e}", file=sys.stderr)
            return 1

    ext = {"ics": ".ics", "csv": ".csv", "json": ".json"}[args.format]
    out_path = Path(args.output).with_suffix(ext) if Path(args.output).suffix else Path(args.output + ext)
    export(events, out_path, args.format)
    print(f"Exported {len(events)} event(s) to {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
