from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta
from typing import NamedTuple

"""Calendar arithmetic shared by the date detectors. Private to sheetmap.dates."""

# Spreadsheet day-count epoch. 1899-12-30 (not 1900-01-01) absorbs the
# historical 1900 leap-year bug of the serial convention.
SERIAL_EPOCH = date(1899, 12, 30)

MIN_YEAR = 1900
MAX_YEAR = 2100

# Leap year used to bound days when no year is known (29/02 stays valid).
_YEARLESS_REFERENCE = 2000


class DateParts(NamedTuple):
    day: int
    month: int
    year: int | None = None


def is_valid_date(day: int, month: int, year: int | None = None) -> bool:
    """True when day/month(/year) denotes a real calendar date inside the window."""
    if month < 1 or month > 12 or day < 1:
        return False
    if year is None:
        return day <= calendar.monthrange(_YEARLESS_REFERENCE, month)[1]
    if year < MIN_YEAR or year > MAX_YEAR:
        return False
    return day <= calendar.monthrange(year, month)[1]


def expand_year(token: str) -> int:
    """Two-digit years map to 20yy; anything else is taken literally."""
    value = int(token)
    if len(token) == 2:
        return 2000 + value
    return value


def serial_to_parts(serial: float) -> DateParts | None:
    """Convert a day-count serial to calendar parts (time of day is dropped)."""
    if not math.isfinite(serial) or serial < 1:
        return None
    try:
        d = SERIAL_EPOCH + timedelta(days=math.floor(serial))
    except OverflowError:
        return None
    return DateParts(d.day, d.month, d.year)


def date_to_serial(value: date | datetime) -> float:
    if isinstance(value, datetime):
        midnight = datetime(value.year, value.month, value.day, tzinfo=value.tzinfo)
        fraction = (value - midnight).total_seconds() / 86400
        return float((value.date() - SERIAL_EPOCH).days) + fraction
    return float((value - SERIAL_EPOCH).days)


def parts_to_date(parts: DateParts, default_year: int) -> date | None:
    year = parts.year if parts.year is not None else default_year
    try:
        return date(year, parts.month, parts.day)
    except ValueError:
        return None


def format_parts(parts: DateParts) -> str:
    """Render canonical ``DD/MM`` or ``DD/MM/YYYY``."""
    if parts.year is None:
        return f"{parts.day:02d}/{parts.month:02d}"
    return f"{parts.day:02d}/{parts.month:02d}/{parts.year}"


def parse_canonical(value: str) -> DateParts | None:
    pieces = value.split("/")
    if len(pieces) not in (2, 3) or not all(p.isdigit() for p in pieces):
        return None
    day, month = int(pieces[0]), int(pieces[1])
    year = int(pieces[2]) if len(pieces) == 3 else None
    return DateParts(day, month, year)
