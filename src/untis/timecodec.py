"""Conversion between WebUntis compact date/time values and datetimes.

WebUntis encodes dates as YYYYMMDD and times as HHMM, either as integers or
as strings. Integer times carry no leading zeros (815 is 08:15, 5 is 00:05).

All datetimes produced here are timezone-naive.
"""

import re
from datetime import date, datetime, timedelta
from typing import NamedTuple

from src.untis.errors import MalformedDateError, MalformedTimeError

# Hours added to every parsed time when composing a datetime. Observed against
# the live server and kept as-is; revalidate before changing.
HOUR_OFFSET = 1

_COMPACT_TIME = re.compile(r"\d{1,4}", re.ASCII)
_COMPACT_DATE = re.compile(r"\d{8}", re.ASCII)


class CompactTime(NamedTuple):
    hour: int
    minute: int


def parse_compact_time(value: int | str) -> CompactTime:
    """Parse an HHMM value into (hour, minute).

    Raises:
        MalformedTimeError: If the value is not a 1-4 digit number or the
            hour/minute are out of range.
    """
    text = str(value).strip()
    if not _COMPACT_TIME.fullmatch(text):
        raise MalformedTimeError(f"Invalid compact time: {value!r}")

    text = text.rjust(4, "0")
    hour, minute = int(text[:2]), int(text[2:])
    if hour > 23 or minute > 59:
        raise MalformedTimeError(f"Compact time out of range: {value!r}")
    return CompactTime(hour, minute)


def parse_compact_date(value: int | str) -> datetime:
    """Parse a YYYYMMDD value into a datetime at midnight.

    Raises:
        MalformedDateError: If the value is not 8 digits or is not a real date.
    """
    text = str(value).strip()
    if not _COMPACT_DATE.fullmatch(text):
        raise MalformedDateError(f"Invalid compact date: {value!r}")

    try:
        return datetime(int(text[:4]), int(text[4:6]), int(text[6:8]))
    except ValueError as e:
        raise MalformedDateError(f"Compact date out of range: {value!r}") from e


def parse_compact_datetime(
    date_value: int | str,
    time_value: int | str,
    hour_offset: int = HOUR_OFFSET,
) -> datetime:
    """Combine a compact date and time, adding hour_offset to the hour.

    The offset is applied as a timedelta, so 23:30 with the default offset
    rolls over to 00:30 on the following day.
    """
    day = parse_compact_date(date_value)
    time = parse_compact_time(time_value)
    return day + timedelta(hours=time.hour + hour_offset, minutes=time.minute)


def format_compact_date(value: date, separator: str = "") -> str:
    """Encode a date (or datetime) as YYYY<sep>MM<sep>DD for outgoing requests."""
    return f"{value.year:04d}{separator}{value.month:02d}{separator}{value.day:02d}"


def start_of_iso_week(value: date) -> date:
    """Return the Monday of the ISO week containing value."""
    return value - timedelta(days=value.weekday())
