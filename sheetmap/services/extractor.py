from __future__ import annotations

import logging

from ..dates import RawValue
from ..excel.address import is_valid_reference
from ..models.mapping_schema import ExtractionResult, MappingSchema, SchemaError
from ..models.snapshot import Snapshot

"""Extractor: apply a MappingSchema to a snapshot.

A pure structural copy with gap reporting. Values are returned exactly as the
snapshot holds them (no date normalization, no coercion). Missing sheets and
empty cells degrade to ``None`` plus a warning; only a malformed schema aborts.
"""

__all__ = [
    "ensure_well_formed",
    "extract",
]

logger = logging.getLogger(__name__)

UNKNOWN_SHEET = "<unknown>"


def ensure_well_formed(schema: MappingSchema) -> None:
    """Raise SchemaError when any field reference is outside the address grammar.

    Checked for the whole schema before any field is extracted so a malformed
    schema never yields a partial record.
    """
    bad = [f"{f.id}:{f.cell_ref!r}" for f in schema.fields if not is_valid_reference(f.cell_ref)]
    if bad:
        raise SchemaError(f"schema '{schema.schema_id}' has invalid cell references: {bad}")


def _is_empty(value: RawValue) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def extract(snapshot: Snapshot, schema: MappingSchema) -> ExtractionResult:
    """Extract a field-name -> value record from ``snapshot``.

    The schema is expected to have been validated against the snapshot, but
    a missing sheet or cell never raises: the field gets ``None`` and a
    warning, and the remaining fields are extracted as usual.

    Args:
        snapshot: workbook to read
        schema: mapping schema to apply

    Returns:
        ExtractionResult with one data entry per field

    Raises:
        SchemaError: a field reference is outside the address grammar
    """
    ensure_well_formed(schema)

    data: dict[str, RawValue] = {}
    warnings: list[str] = []

    for f in schema.fields:
        sheet = snapshot.get_sheet(f.sheet_name)
        if sheet is None:
            data[f.field_name] = None
            warnings.append(f"Sheet '{f.sheet_name or UNKNOWN_SHEET}' not found for field '{f.field_name}'")
            continue

        cell = sheet.get(f.cell_ref)
        value = cell.value if cell is not None else None
        if _is_empty(value):
            data[f.field_name] = None
            warnings.append(f"No value at {sheet.name}!{f.cell_ref} for field '{f.field_name}'")
            continue

        data[f.field_name] = value

    if warnings:
        logger.debug(
            "extract schema=%s file=%s warnings=%d", schema.schema_id, snapshot.file_name, len(warnings)
        )
    return ExtractionResult(data=data, warnings=warnings)
