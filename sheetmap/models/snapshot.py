from __future__ import annotations

from dataclasses import dataclass, field

from ..dates import RawValue

"""Spreadsheet snapshot domain models.

A Snapshot is the already-decoded view of one workbook: sheets in declaration
order, each with an address -> CellRecord map and its merge ranges. Snapshots
are built once per loaded workbook and treated as immutable afterwards, which
is what lets independent snapshots be processed concurrently without locks.
"""

__all__ = [
    "CellRecord",
    "Sheet",
    "Snapshot",
]


@dataclass(frozen=True)
class CellRecord:
    """One decoded cell. Owned by its Sheet."""
    value: RawValue = None
    is_merged: bool = False
    merge_range: str | None = None  # e.g. "A1:B2" when the cell belongs to a merge

    @property
    def is_blank(self) -> bool:
        return self.value is None or (isinstance(self.value, str) and self.value.strip() == "")


@dataclass(frozen=True)
class Sheet:
    """A worksheet: dimensions, cells keyed by reference (``"B2"``) and merge ranges."""
    name: str
    row_count: int = 0
    col_count: int = 0
    cells: dict[str, CellRecord] = field(default_factory=dict)
    merge_ranges: tuple[str, ...] = ()

    def get(self, reference: str) -> CellRecord | None:
        return self.cells.get(reference)

    def has_cell(self, reference: str) -> bool:
        return reference in self.cells


@dataclass(frozen=True)
class Snapshot:
    """Decoded workbook handed to the core by an external decoder."""
    file_name: str
    sheets: tuple[Sheet, ...] = ()

    @property
    def sheet_names(self) -> list[str]:
        return [s.name for s in self.sheets]

    def get_sheet(self, name: str | None) -> Sheet | None:
        if name is None:
            return None
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        return None
