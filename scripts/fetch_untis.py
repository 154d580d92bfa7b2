"""Fetch a student's timetable, absences or school year from WebUntis.

Standalone CLI script. Logs in with the credentials from .env, fetches the
requested data, and prints JSON (default) or a human-readable table.

Run with: python scripts/fetch_untis.py
Table:    python scripts/fetch_untis.py --table
Week of:  python scripts/fetch_untis.py --week 2023-09-14
Absences: python scripts/fetch_untis.py --absences --from 2023-09-01 --to 2023-12-22
Year:     python scripts/fetch_untis.py --schoolyear

Environment (.env):
  UNTIS_SCHOOL, UNTIS_USER, UNTIS_PASS   required
  UNTIS_BASE_URL                         default https://erato.webuntis.com/WebUntis
  UNTIS_HOUR_OFFSET                      default 1
  LOG_JSON, LOG_LEVEL

Exit codes:
  0 = success (JSON or table on stdout)
  1 = error (message on stderr)
"""

import argparse
import asyncio
import json
import os
import sys
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.untis.client import UntisClient  # noqa: E402
from src.untis.config import get_config  # noqa: E402
from src.untis.logging import setup_logging  # noqa: E402
from src.untis.models import TimetableEntry  # noqa: E402
from src.untis.transport import AiohttpRequester  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Fetch timetable, absences or school year from WebUntis.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--week",
        type=date.fromisoformat,
        default=None,
        help="Any date (YYYY-MM-DD) in the week to fetch (default: today).",
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--absences",
        action="store_true",
        help="Fetch absences between --from and --to instead of the timetable.",
    )
    mode_group.add_argument(
        "--schoolyear",
        action="store_true",
        help="Fetch the current school year instead of the timetable.",
    )

    parser.add_argument("--from", dest="start", type=date.fromisoformat, default=None)
    parser.add_argument("--to", dest="end", type=date.fromisoformat, default=None)
    parser.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable table (timetable mode only).",
    )
    return parser.parse_args()


def _format_table(entries: list[TimetableEntry]) -> str:
    """Format timetable entries as a day/time/subject table."""
    if not entries:
        return "(no lessons)"

    headers = ["Day", "Time", "Subject", "Status"]
    rows = [
        [
            entry.start_date.strftime("%a %d.%m."),
            f"{entry.start_date:%H:%M}-{entry.end_date:%H:%M}",
            entry.subject,
            "cancelled" if entry.cancelled else "",
        ]
        for entry in entries
    ]

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)
    row_lines = [
        " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)) for row in rows
    ]
    return "\n".join([header_line, separator, *row_lines])


async def main(args: argparse.Namespace) -> None:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    if not config.untis_school or not config.untis_user or not config.untis_pass:
        _log("  ERROR: UNTIS_SCHOOL, UNTIS_USER and UNTIS_PASS must be set in .env")
        sys.exit(1)

    if args.absences and (args.start is None or args.end is None):
        _log("  ERROR: --absences needs --from and --to")
        sys.exit(1)

    _log(f"fetch_untis: starting (school={config.untis_school})")

    async with AiohttpRequester() as requester:
        client = UntisClient.from_config(requester, config)
        await client.authenticate(config.untis_user, config.untis_pass)
        _log(f"  Logged in (person id {client.person_id})")

        if args.schoolyear:
            year = await client.get_current_schoolyear()
            print(json.dumps(year.model_dump(mode="json"), indent=2))
        elif args.absences:
            absences = await client.get_absences(args.start, args.end)
            _log(f"  {len(absences)} absences")
            output = [absence.model_dump(mode="json") for absence in absences]
            print(json.dumps(output, indent=2))
        else:
            entries = await client.get_timetable_week(args.week or date.today())
            _log(f"  {len(entries)} lessons")
            if args.table:
                print(_format_table(entries))
            else:
                output = [entry.model_dump(mode="json") for entry in entries]
                print(json.dumps(output, indent=2))

    _log("fetch_untis: done")


if __name__ == "__main__":
    args = _parse_args()
    try:
        asyncio.run(main(args))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
