from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Issue log buffering.

Records found during a batch run are kept in memory and written once, as JSON
Lines with a fixed key set, to ``<logs_dir>/issues-YYYYMMDD-HHMMSS.log`` (UTC).
The file is only created when there is something to write.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "SNAPSHOT_LOAD_ERROR",
    "STRUCTURAL_MISMATCH",
    "MISSING_VALUE",
    "DOMAIN_NOTICE",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

SNAPSHOT_LOAD_ERROR = "SNAPSHOT_LOAD_ERROR"
STRUCTURAL_MISMATCH = "STRUCTURAL_MISMATCH"
MISSING_VALUE = "MISSING_VALUE"
DOMAIN_NOTICE = "DOMAIN_NOTICE"


class ErrorLogBuffer:
    """In-memory buffer of ErrorRecords, flushed as JSON Lines.

    Serial use only; the file path is fixed on first access.
    """

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._logs_dir = logs_dir
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"issues-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def add(self, file: str, schema: str, error_type: str, message: str) -> None:
        self.append(ErrorRecord.create(file, schema, error_type, message))

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file and clear the buffer.

        Returns:
            Path written to, or None when the buffer was empty
        """
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
