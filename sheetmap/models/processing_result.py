from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Batch processing result models.

Aggregates what happened when one mapping schema was applied to every
snapshot file of a directory: per-file status, the extracted records and the
totals printed on the SUMMARY line.
"""


class FileStatus(Enum):
    """Outcome of one snapshot file.

    - SUCCESS: validated and extracted (warnings allowed)
    - INVALID: structure does not match the schema, extraction skipped
    - FAILED: snapshot could not be loaded
    """
    SUCCESS = "success"
    INVALID = "invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics."""
    file_name: str
    status: str  # FileStatus value
    extracted_fields: int
    warnings: int
    elapsed_seconds: float
    errors: list[str] = field(default_factory=list)  # validator errors or load failure


@dataclass(frozen=True)
class ExtractedFile:
    """Record extracted from one snapshot file."""
    file_name: str
    data: dict[str, Any]
    warnings: list[str]
    record: dict[str, Any] | None = None  # domain record values, when a domain was requested

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "file": self.file_name,
            "data": self.data,
            "warnings": self.warnings,
        }
        if self.record is not None:
            # date objects are rendered as ISO strings for JSON output
            out["record"] = {
                k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in self.record.items()
            }
        return out


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of a batch run."""
    success_files: int
    failed_files: int
    total_fields: int
    total_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
    records: list[ExtractedFile] | None = None
