from __future__ import annotations

import re

from ._calendar import DateParts, expand_year, is_valid_date, serial_to_parts

"""Format detectors for raw spreadsheet date values. Private to sheetmap.dates.

Every detector is a pure function that either returns validated DateParts or
None. An invalid day-for-month (31/04) makes the detector decline, so the
normalizer falls through to the next convention instead of reporting it.
"""

# Insertion order matters: full names are tried before the 3-letter
# abbreviations they contain.
SPANISH_MONTHS: dict[str, int] = {
    "enero": 1,
    "febrero": 2,
    "marzo": 3,
    "abril": 4,
    "mayo": 5,
    "junio": 6,
    "julio": 7,
    "agosto": 8,
    "septiembre": 9,
    "setiembre": 9,
    "octubre": 10,
    "noviembre": 11,
    "diciembre": 12,
    "ene": 1,
    "feb": 2,
    "mar": 3,
    "abr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dic": 12,
}

ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
NUMERIC_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?$")
SEPARATOR_RE = re.compile(r"[-\s]")
LEADING_DAY_RE = re.compile(r"^(\d{1,2})(?!\d)")
YEAR_RE = re.compile(r"(?:^|\D)(\d{2,4})(?:\D|$)")
PLAIN_NUMBER_RE = re.compile(r"^\d+(?:[.,]\d+)?$")
BARE_PAIR_RE = re.compile(r"^(\d{1,2})/(\d{1,2})$")

SERIAL_TEXT_MIN = 1
SERIAL_TEXT_MAX = 100000


def _accept(parts: DateParts) -> DateParts | None:
    if is_valid_date(parts.day, parts.month, parts.year):
        return parts
    return None


def detect_serial(value: float) -> DateParts | None:
    parts = serial_to_parts(value)
    if parts is None:
        return None
    return _accept(parts)


def detect_iso(text: str) -> DateParts | None:
    """``YYYY-MM-DD`` only; no time component, no other separators."""
    m = ISO_RE.match(text)
    if not m:
        return None
    return _accept(DateParts(int(m.group(3)), int(m.group(2)), int(m.group(1))))


def detect_numeric_slash(text: str) -> DateParts | None:
    """``D/M``, ``D/M/YY`` or ``D/M/YYYY``; ``-`` and whitespace act as ``/``."""
    m = NUMERIC_SLASH_RE.match(SEPARATOR_RE.sub("/", text))
    if not m:
        return None
    year = expand_year(m.group(3)) if m.group(3) else None
    return _accept(DateParts(int(m.group(1)), int(m.group(2)), year))


def find_spanish_month(text: str) -> int | None:
    lowered = text.lower()
    for name, number in SPANISH_MONTHS.items():
        if name in lowered:
            return number
    return None


def detect_text_month_es(text: str) -> DateParts | None:
    """Leading day plus a Spanish month anywhere, e.g. ``22 de noviembre de 2024``, ``22-NOV-24``."""
    cleaned = text.lower()
    day_match = LEADING_DAY_RE.match(cleaned)
    if not day_match:
        return None
    day = int(day_match.group(1))
    if day < 1 or day > 31:
        return None
    month = find_spanish_month(cleaned)
    if month is None:
        return None
    # the year is searched after the day token so the day is never re-read as "yy"
    year_match = YEAR_RE.search(cleaned[day_match.end():])
    year = expand_year(year_match.group(1)) if year_match else None
    return _accept(DateParts(day, month, year))


def detect_serial_text(text: str) -> DateParts | None:
    """Numeric text (comma or dot decimals) inside (1, 100000) read as a serial."""
    if not PLAIN_NUMBER_RE.match(text):
        return None
    number = float(text.replace(",", "."))
    if not SERIAL_TEXT_MIN < number < SERIAL_TEXT_MAX:
        return None
    return detect_serial(number)


def is_ambiguous(text: str) -> bool:
    """Date-shaped input whose convention cannot be determined safely.

    Either a bare month name (``noviembre``, ``nov``) or a bare ``D/D`` pair
    that was not accepted as DD/MM but reads as a date under another
    convention (both parts <= 12 and unequal, or valid as MM/DD).
    """
    if text.lower() in SPANISH_MONTHS:
        return True
    m = BARE_PAIR_RE.match(SEPARATOR_RE.sub("/", text))
    if not m:
        return False
    first, second = int(m.group(1)), int(m.group(2))
    if first < 1 or second < 1:
        return False
    if first <= 12 and second <= 12 and first != second:
        return True
    return is_valid_date(second, first)
