"""Domain models for the spreadsheet mapping tool.

Snapshots (decoded workbooks), mapping schemas, validation and extraction
results, and the batch processing / issue log records.
"""

from .error_record import ErrorRecord
from .mapping_schema import ExtractionResult, FieldMapping, MappingSchema, SchemaError, ValidationResult
from .processing_result import ExtractedFile, FileStat, FileStatus, ProcessingResult
from .snapshot import CellRecord, Sheet, Snapshot

__all__ = [
    # Snapshot models
    "CellRecord",
    "Sheet",
    "Snapshot",
    # Schema models
    "FieldMapping",
    "MappingSchema",
    "SchemaError",
    "ValidationResult",
    "ExtractionResult",
    # Processing models
    "ErrorRecord",
    "ExtractedFile",
    "FileStat",
    "FileStatus",
    "ProcessingResult",
]
