"""Map spreadsheet cells to named fields and extract them from similar workbooks.

Core pieces: ``sheetmap.dates`` (date normalization), ``sheetmap.excel``
(cell addresses and snapshots) and ``sheetmap.services`` (schema builder,
validator, extractor and batch orchestration).
"""

from .dates import Confidence, DateParseResult, SourceFormat, normalize, to_date, to_serial
from .excel.address import AddressError, parse_address, resolve
from .excel.snapshot import SnapshotError, load_snapshot, snapshot_from_dict, snapshot_from_frames
from .models import ExtractionResult, FieldMapping, MappingSchema, SchemaError, Snapshot, ValidationResult
from .services.extractor import extract
from .services.schema_builder import BuildOptions, build_schema
from .services.schema_validator import validate_schema

__version__ = "0.1.0"

__all__ = [
    "AddressError",
    "BuildOptions",
    "Confidence",
    "DateParseResult",
    "ExtractionResult",
    "FieldMapping",
    "MappingSchema",
    "SchemaError",
    "Snapshot",
    "SnapshotError",
    "SourceFormat",
    "ValidationResult",
    "build_schema",
    "extract",
    "load_snapshot",
    "normalize",
    "parse_address",
    "resolve",
    "snapshot_from_dict",
    "snapshot_from_frames",
    "to_date",
    "to_serial",
    "validate_schema",
]
