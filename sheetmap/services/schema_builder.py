from __future__ import annotations

import logging
import re
import uuid
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ..excel.address import parse_address, resolve
from ..models.mapping_schema import FieldMapping, MappingSchema, SchemaError
from ..models.snapshot import Snapshot

"""Schema builder: user-selected cell addresses -> persisted MappingSchema.

Each (address, field name) pair is resolved against the authoring snapshot
and the cell's current value, merge state and a cheap value-type tag are
recorded as advisory metadata. Nothing is validated here; compatibility with
a workbook is checked later by schema_validator.
"""

__all__ = [
    "BuildOptions",
    "build_schema",
    "infer_value_type",
]

logger = logging.getLogger(__name__)

# Advisory only: a datetime-looking ISO prefix. The authoritative date check is
# sheetmap.dates.normalize, run at consumption time.
_ISO_DATETIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:?\d{0,2}")


@dataclass(frozen=True)
class BuildOptions:
    schema_id: str | None = None
    schema_name: str | None = None
    version: str = "1.0"
    source_file: str | None = None  # defaults to the snapshot file name


def infer_value_type(value: Any) -> str:
    """Best-effort UI hint: empty | number | boolean | date | string."""
    if value is None or value == "":
        return "empty"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str) and _ISO_DATETIME_PREFIX.match(value):
        return "date"
    return "string"


def _new_schema_id() -> str:
    return f"schema_{uuid.uuid4().hex[:12]}"


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def build_schema(
    pairs: Iterable[tuple[str, str]],
    snapshot: Snapshot,
    options: BuildOptions | None = None,
) -> MappingSchema:
    """Build a MappingSchema from (address, field name) pairs.

    Addresses that resolve get a sample value, value type and merge info from
    the snapshot. Addresses that do not resolve are still emitted (sheet name
    only when the address named one) so schemas can be drafted incrementally.

    Args:
        pairs: (cell address, field name) tuples, e.g. ``("Hoja1!B2", "empresa")``
        snapshot: authoring workbook snapshot
        options: schema id / name / version / source file overrides

    Returns:
        MappingSchema with one FieldMapping per pair, ids ``f1..fn`` in pair order

    Raises:
        AddressError: an address is outside the cell reference grammar
        SchemaError: a field name is empty
    """
    options = options or BuildOptions()
    fields: list[FieldMapping] = []

    for index, (token, field_name) in enumerate(pairs, start=1):
        name = (field_name or "").strip()
        if not name:
            raise SchemaError(f"empty field name for address {token!r}")
        address = parse_address(token)
        field_id = f"f{index}"

        resolved = resolve(address, snapshot)
        if resolved is None:
            logger.debug("field=%s address=%s not in authoring snapshot", name, address)
            fields.append(
                FieldMapping(
                    id=field_id,
                    field_name=name,
                    sheet_name=address.sheet_name,
                    cell_ref=address.reference,
                )
            )
            continue

        fields.append(
            FieldMapping(
                id=field_id,
                field_name=name,
                sheet_name=resolved.sheet_name,
                cell_ref=resolved.reference,
                sample_value=resolved.cell.value,
                value_type=infer_value_type(resolved.cell.value),
                is_merged=resolved.is_merged,
                merge_range=resolved.merge_range,
            )
        )

    duplicated = [n for n, count in Counter(f.field_name for f in fields).items() if count > 1]
    if duplicated:
        # extraction keys records by field name; later fields win
        logger.warning("schema has repeated field names: %s", sorted(duplicated))

    return MappingSchema(
        schema_id=options.schema_id or _new_schema_id(),
        schema_name=options.schema_name,
        version=options.version,
        created_at=_utc_now_iso(),
        source_file=options.source_file or snapshot.file_name,
        fields=tuple(fields),
    )
