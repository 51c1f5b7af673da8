from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

import jsonschema
import numpy as np
import pandas as pd
from jsonschema.exceptions import ValidationError

from ..contracts import SNAPSHOT_SCHEMA_PATH
from ..dates import RawValue, to_serial
from ..models.snapshot import CellRecord, Sheet, Snapshot
from .address import AddressError, index_to_column, parse_range

"""Snapshot adapters: turn already-decoded workbook data into Snapshot models.

Two inputs are accepted, neither of which involves decoding binary files:

- the JSON snapshot document produced by an external decoder
  (``{"fileName": ..., "sheets": {name: {rowCount, colCount, cells, mergeRanges}}}``,
  ``sheets`` may also be a list of objects carrying ``name``)
- a dict of pandas DataFrames read with ``header=None`` (grid layout, row 0 = row 1)
"""

__all__ = [
    "SnapshotError",
    "snapshot_from_dict",
    "load_snapshot",
    "snapshot_from_frames",
]

logger = logging.getLogger(__name__)

_snapshot_schema: dict[str, Any] | None = None


class SnapshotError(Exception):
    """Raised when a snapshot document is unreadable or malformed."""


def _schema() -> dict[str, Any]:
    global _snapshot_schema
    if _snapshot_schema is None:
        _snapshot_schema = json.loads(SNAPSHOT_SCHEMA_PATH.read_text(encoding="utf-8"))
    return _snapshot_schema


def _check_ranges(sheet_name: str, ranges: list[str]) -> tuple[str, ...]:
    for text in ranges:
        try:
            parse_range(text)
        except AddressError as e:
            raise SnapshotError(f"sheet '{sheet_name}': {e}") from e
    return tuple(ranges)


def _sheet_from_body(name: str, body: Mapping[str, Any]) -> Sheet:
    cells: dict[str, CellRecord] = {}
    for ref, raw in body.get("cells", {}).items():
        key = str(ref).strip().upper()
        if key in cells:
            raise SnapshotError(f"sheet '{name}': duplicate cell reference {key}")
        cells[key] = CellRecord(
            value=raw.get("value"),
            is_merged=bool(raw.get("isMerged", False)),
            merge_range=raw.get("mergeRange"),
        )
    return Sheet(
        name=name,
        row_count=int(body.get("rowCount", 0)),
        col_count=int(body.get("colCount", 0)),
        cells=cells,
        merge_ranges=_check_ranges(name, list(body.get("mergeRanges", []))),
    )


def snapshot_from_dict(data: Mapping[str, Any], file_name: str | None = None) -> Snapshot:
    """Build a Snapshot from the decoder's JSON document.

    Sheet order is the document order, which is the order unqualified
    addresses are searched in.

    Raises:
        SnapshotError: document fails the snapshot contract or holds bad merge ranges
    """
    try:
        jsonschema.validate(dict(data), _schema())
    except ValidationError as e:
        raise SnapshotError(f"snapshot validation failed: {e.message}") from e

    raw_sheets = data["sheets"]
    if isinstance(raw_sheets, Mapping):
        items = [(str(name), body) for name, body in raw_sheets.items()]
    else:
        items = [(str(body["name"]), body) for body in raw_sheets]

    names = [name for name, _ in items]
    if len(names) != len(set(names)):
        raise SnapshotError(f"duplicate sheet names: {names}")

    sheets = tuple(_sheet_from_body(name, body) for name, body in items)
    return Snapshot(file_name=file_name or data.get("fileName") or "<memory>", sheets=sheets)


def load_snapshot(path: Path) -> Snapshot:
    if not path.exists():
        raise SnapshotError(f"snapshot file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotError(f"invalid snapshot json: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError(f"snapshot must be a JSON object: {path}")
    return snapshot_from_dict(data, file_name=data.get("fileName") or path.name)


def _coerce(value: Any) -> RawValue | bool:
    """Collapse pandas/numpy scalars into plain cell values."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, (datetime, date)):
        # Timestamps come back from the decoder as datetimes; cells store serials
        return to_serial(value)
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        f = float(value)
        return int(f) if f.is_integer() else f
    if isinstance(value, (int, str)):
        return value
    return str(value)


def snapshot_from_frames(
    frames: Mapping[str, pd.DataFrame],
    file_name: str,
    merge_ranges: Mapping[str, list[str]] | None = None,
) -> Snapshot:
    """Build a Snapshot from DataFrames read without header (``header=None``).

    NaN cells are left out of the cell map. Every reference covered by a merge
    range gets a merged CellRecord (the anchor keeps its value, covered cells
    are empty).

    Parameters
    ----------
    frames: sheet name -> raw grid DataFrame, in workbook order
    file_name: name recorded on the Snapshot
    merge_ranges: optional sheet name -> list of ``A1:B2`` ranges
    """
    merge_ranges = merge_ranges or {}
    sheets: list[Sheet] = []
    for name, df in frames.items():
        cells: dict[str, CellRecord] = {}
        grid = df.to_numpy(dtype=object)
        for r, row in enumerate(grid):
            for c, raw in enumerate(row):
                value = _coerce(raw)
                if value is None:
                    continue
                cells[f"{index_to_column(c)}{r + 1}"] = CellRecord(value=value)

        ranges = _check_ranges(str(name), list(merge_ranges.get(name, [])))
        for text in ranges:
            for ref in parse_range(text).references():
                current = cells.get(ref)
                cells[ref] = CellRecord(
                    value=current.value if current is not None else None,
                    is_merged=True,
                    merge_range=text,
                )

        sheets.append(
            Sheet(
                name=str(name),
                row_count=int(df.shape[0]),
                col_count=int(df.shape[1]),
                cells=cells,
                merge_ranges=ranges,
            )
        )
        logger.debug("sheet=%s cells=%d merges=%d", name, len(cells), len(ranges))
    return Snapshot(file_name=file_name, sheets=tuple(sheets))
