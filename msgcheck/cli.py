"""Command-line runner for the smoke checks."""
import argparse
import json
import logging
import sys
from datetime import date
from typing import List, Optional

from .checks import DEFAULT_CALENDAR_USER, DEFAULT_END_DATE, DEFAULT_START_DATE, SUITES, run_suite
from .config import ConfigError
from .db_supabase import SupabaseStore

logger = logging.getLogger(__name__)

EXIT_USAGE = 2


def _iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msgcheck",
        description="Smoke-check the messaging and calendar tables and functions on Supabase.",
    )
    parser.add_argument("suite", choices=[*SUITES, "all"], help="suite to run, or 'all'")
    calendar = parser.add_argument_group("calendar options", "only accepted with the calendar suite or 'all'")
    calendar.add_argument("--user-id", help=f"user to query (default: {DEFAULT_CALENDAR_USER})")
    calendar.add_argument("--start-date", type=_iso_date, help=f"YYYY-MM-DD (default: {DEFAULT_START_DATE})")
    calendar.add_argument("--end-date", type=_iso_date, help=f"YYYY-MM-DD (default: {DEFAULT_END_DATE})")
    parser.add_argument("--json", action="store_true", help="print the reports as JSON after the run")
    parser.add_argument("-v", "--verbose", action="store_true", help="log requests and failures")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    calendar_opts = [opt for opt, value in (("--user-id", args.user_id), ("--start-date", args.start_date),
                                            ("--end-date", args.end_date)) if value is not None]
    if calendar_opts and args.suite not in ("calendar", "all"):
        parser.error(f"{', '.join(calendar_opts)} only apply to the calendar suite")
    args.user_id = args.user_id or DEFAULT_CALENDAR_USER
    args.start_date = args.start_date or DEFAULT_START_DATE
    args.end_date = args.end_date or DEFAULT_END_DATE

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s: %(message)s",
    )

    if args.start_date > args.end_date:
        print("❌ --start-date must not be after --end-date", file=sys.stderr)
        return EXIT_USAGE

    try:
        store = SupabaseStore()
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_USAGE

    names = list(SUITES) if args.suite == "all" else [args.suite]
    reports = []
    try:
        for i, name in enumerate(names):
            if i:
                print("\n" + "=" * 60 + "\n")
            params = {}
            if name == "calendar":
                params = {"user_id": args.user_id, "start_date": args.start_date, "end_date": args.end_date}
            reports.append(run_suite(name, store, **params))
    finally:
        store.close()

    if args.json:
        print(json.dumps([r.to_dict() for r in reports], indent=2))

    failed = sum(r.failed_count for r in reports)
    logger.info("%d suite(s) run, %d failed check(s)", len(reports), failed)
    return 0 if all(r.ok for r in reports) else 1
