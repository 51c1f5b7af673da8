from __future__ import annotations

import logging
import numbers
from collections.abc import Callable
from datetime import date, datetime

from . import _calendar, _detectors
from .result import Confidence, DateParseResult, RawValue, SourceFormat

"""Date normalizer: the single entry point for turning raw cells into dates.

Precedence (first match wins):
    1. numeric value          -> serial          (high)
    2. ISO text YYYY-MM-DD    -> iso             (high)
    3. D/M[/Y] text           -> numeric-slash   (high)
    4. day + Spanish month    -> text-month-es   (medium)
    5. numeric text 1..100000 -> serial          (medium)
    6. bare month / D/D pair  -> ambiguous       (low, not a date)
    7. anything else          -> unknown         (low, not a date)
"""

__all__ = [
    "normalize",
    "to_date",
    "to_serial",
]

logger = logging.getLogger(__name__)

_TEXT_DETECTORS: tuple[tuple[Callable[[str], _calendar.DateParts | None], Confidence, SourceFormat], ...] = (
    (_detectors.detect_iso, Confidence.HIGH, SourceFormat.ISO),
    (_detectors.detect_numeric_slash, Confidence.HIGH, SourceFormat.NUMERIC_SLASH),
    (_detectors.detect_text_month_es, Confidence.MEDIUM, SourceFormat.TEXT_MONTH_ES),
    (_detectors.detect_serial_text, Confidence.MEDIUM, SourceFormat.SERIAL),
)


def _is_number(raw: object) -> bool:
    return isinstance(raw, numbers.Real) and not isinstance(raw, bool)


def _matched(parts: _calendar.DateParts, confidence: Confidence, fmt: SourceFormat, raw: RawValue) -> DateParseResult:
    return DateParseResult(
        value=_calendar.format_parts(parts),
        is_date=True,
        confidence=confidence,
        source_format=fmt,
        original=raw,
    )


def _declined(raw: RawValue, fmt: SourceFormat = SourceFormat.UNKNOWN) -> DateParseResult:
    return DateParseResult(
        value=None,
        is_date=False,
        confidence=Confidence.LOW,
        source_format=fmt,
        original=raw,
    )


def normalize(raw: RawValue) -> DateParseResult:
    """Normalize one raw spreadsheet value into a canonical date.

    Total and deterministic: every input yields a DateParseResult, the worst
    case being ``is_date=False, confidence=low, source_format=unknown``.

    Args:
        raw: value as handed over by the workbook decoder (None, number or text)

    Returns:
        DateParseResult with canonical ``DD/MM`` or ``DD/MM/YYYY`` value when
        a convention matched.
    """
    if raw is None:
        return _declined(raw)

    if _is_number(raw):
        try:
            serial = float(raw)
        except OverflowError:
            # integers beyond float range cannot be serials
            serial = None
        parts = _detectors.detect_serial(serial) if serial is not None else None
        if parts is not None:
            return _matched(parts, Confidence.HIGH, SourceFormat.SERIAL, raw)

    text = str(raw).strip()
    if not text:
        return _declined(raw)

    for detector, confidence, fmt in _TEXT_DETECTORS:
        parts = detector(text)
        if parts is not None:
            return _matched(parts, confidence, fmt, raw)

    if _detectors.is_ambiguous(text):
        logger.debug("ambiguous date-like input declined: %r", raw)
        return _declined(raw, SourceFormat.AMBIGUOUS)
    return _declined(raw)


def to_date(raw: RawValue, default_year: int | None = None) -> date | None:
    """Return a calendar date for ``raw`` or None when normalization declined.

    Year-less canonical dates (``DD/MM``) take ``default_year``, or the
    current year when none is given. A day that does not exist in that year
    (29/02 outside leap years) yields None.
    """
    result = normalize(raw)
    if not result.is_date or result.value is None:
        return None
    parts = _calendar.parse_canonical(result.value)
    if parts is None:  # pragma: no cover - normalize only emits canonical strings
        return None
    year = default_year if default_year is not None else date.today().year
    return _calendar.parts_to_date(parts, year)


def to_serial(value: date | datetime) -> float:
    """Inverse of the serial convention: days since 1899-12-30 (time as fraction)."""
    return _calendar.date_to_serial(value)
