"""Date normalization for spreadsheet values.

Only the names exported here are public. ``_calendar`` and ``_detectors`` are
internal to this package; other components obtain dates exclusively through
``normalize`` / ``to_date``.
"""

from .normalizer import normalize, to_date, to_serial
from .result import Confidence, DateParseResult, RawValue, SourceFormat

__all__ = [
    "normalize",
    "to_date",
    "to_serial",
    "Confidence",
    "DateParseResult",
    "RawValue",
    "SourceFormat",
]
