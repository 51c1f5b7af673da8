from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines issue log.

One record per structural mismatch, missing value or unreadable snapshot
found during a batch run. The key set is fixed; see
tests/contract/test_issue_log_contract.py.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured issue record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: snapshot file name being processed
        schema: schema id applied to the file
        error_type: classification in UPPER_SNAKE_CASE
            (SNAPSHOT_LOAD_ERROR, STRUCTURAL_MISMATCH, MISSING_VALUE, DOMAIN_NOTICE)
        message: human readable description (validator error or extraction warning)
    """
    timestamp: str
    file: str
    schema: str
    error_type: str
    message: str

    @staticmethod
    def create(file: str, schema: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            schema=schema,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set closed
        return json.dumps(asdict(self), ensure_ascii=False)
