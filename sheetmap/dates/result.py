from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

"""DateParseResult model and its confidence / source-format enums.

A DateParseResult explains what the date normalizer made of one raw cell
value. Low confidence results are never usable dates; they only carry the
reason normalization declined (``ambiguous`` vs ``unknown``).
"""

__all__ = [
    "RawValue",
    "Confidence",
    "SourceFormat",
    "DateParseResult",
]

# Value handed over by the external workbook decoder (absent, number or text).
RawValue = Union[None, int, float, str]


class Confidence(Enum):
    """How certain the format match is.

    - HIGH: unambiguous machine format (serial number, ISO, DD/MM[/YYYY])
    - MEDIUM: human text (Spanish month names) or numeric text read as serial
    - LOW: declined; never accompanies a usable date
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SourceFormat(Enum):
    """Convention that produced (or refused) the canonical date."""
    SERIAL = "serial"
    ISO = "iso"
    NUMERIC_SLASH = "numeric-slash"
    TEXT_MONTH_ES = "text-month-es"
    AMBIGUOUS = "ambiguous"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DateParseResult:
    """Outcome of normalizing one raw value.

    Attributes:
        value: canonical ``DD/MM`` or ``DD/MM/YYYY`` string, None when declined
        is_date: True only when ``value`` is a usable canonical date
        confidence: certainty grade of the match
        source_format: convention that matched, or why nothing matched
        original: the raw input, untouched
    """
    value: str | None
    is_date: bool
    confidence: Confidence
    source_format: SourceFormat
    original: Any = None

    def __post_init__(self) -> None:
        if self.is_date and not self.value:
            raise ValueError("is_date requires a canonical value")
        if self.confidence is Confidence.LOW and self.is_date:
            raise ValueError("low confidence results cannot be dates")

    @property
    def is_ambiguous(self) -> bool:
        return self.source_format is SourceFormat.AMBIGUOUS

    def to_dict(self) -> dict[str, Any]:
        """JSON friendly representation (camelCase keys, enum values)."""
        return {
            "value": self.value,
            "isDate": self.is_date,
            "confidence": self.confidence.value,
            "sourceFormat": self.source_format.value,
            "original": self.original,
        }
