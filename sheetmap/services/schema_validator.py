from __future__ import annotations

import logging

from ..excel.address import is_valid_reference
from ..models.mapping_schema import MappingSchema, ValidationResult
from ..models.snapshot import Snapshot

"""Schema validator: structural compatibility of a MappingSchema with a snapshot.

All fields are checked and every mismatch is reported (no short-circuit), one
error per broken field, so a caller sees the full set in a single pass.
Whether an invalid verdict blocks extraction is the caller's decision.
"""

__all__ = [
    "validate_schema",
]

logger = logging.getLogger(__name__)


def validate_schema(snapshot: Snapshot, schema: MappingSchema) -> ValidationResult:
    """Check that every field's sheet and cell reference exist in ``snapshot``.

    Args:
        snapshot: candidate workbook
        schema: mapping schema to check

    Returns:
        ValidationResult(valid, errors); valid iff no errors
    """
    errors: list[str] = []
    for f in schema.fields:
        label = f"field '{f.field_name}' (id={f.id})"
        if not f.sheet_name:
            errors.append(f"Missing sheet name for {label}")
            continue
        sheet = snapshot.get_sheet(f.sheet_name)
        if sheet is None:
            errors.append(f"Sheet '{f.sheet_name}' for {label} not found in workbook")
            continue
        if not is_valid_reference(f.cell_ref):
            errors.append(f"Cell reference '{f.cell_ref}' for {label} is not a valid address")
            continue
        if not sheet.has_cell(f.cell_ref):
            errors.append(f"Cell '{f.sheet_name}!{f.cell_ref}' for {label} not found in workbook")

    result = ValidationResult.from_errors(errors)
    logger.debug(
        "validate schema=%s file=%s valid=%s errors=%d",
        schema.schema_id,
        snapshot.file_name,
        result.valid,
        len(errors),
    )
    return result
