from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from openpyxl.utils.cell import (
    column_index_from_string,
    coordinate_from_string,
    get_column_letter,
    range_boundaries,
)

from ..models.snapshot import CellRecord, Sheet, Snapshot

"""Cell address grammar and resolution against a snapshot.

Tokens look like ``B2``, ``Hoja1!B2`` or ``'Datos 2024'!B2``. Column letters
are case-insensitive on input and always upper-cased in canonical references.
Resolution is a pure lookup: unqualified tokens are searched in every sheet in
declaration order and the first sheet holding the reference wins.
"""

__all__ = [
    "AddressError",
    "CellAddress",
    "CellRange",
    "ResolvedCell",
    "SHEET_SEPARATOR",
    "column_to_index",
    "index_to_column",
    "is_valid_reference",
    "parse_address",
    "parse_range",
    "find_merge_range",
    "resolve",
]

logger = logging.getLogger(__name__)

SHEET_SEPARATOR = "!"
REFERENCE_RE = re.compile(r"^([A-Z]{1,3})([1-9][0-9]*)$")


class AddressError(ValueError):
    """Raised when a token does not follow the column-letter/row-number grammar."""


@dataclass(frozen=True)
class CellAddress:
    sheet_name: str | None
    reference: str

    def __str__(self) -> str:
        if self.sheet_name is None:
            return self.reference
        return f"{self.sheet_name}{SHEET_SEPARATOR}{self.reference}"


def column_to_index(letters: str) -> int:
    """Convert column letters to a 0-based index (A -> 0, Z -> 25, AA -> 26)."""
    letters = letters.strip()
    if not letters:
        raise AddressError("empty column letters")
    try:
        return column_index_from_string(letters) - 1
    except ValueError as e:
        raise AddressError(f"invalid column letters: {letters!r}") from e


def index_to_column(index: int) -> str:
    """Convert a 0-based column index back to letters (0 -> A, 26 -> AA)."""
    if index < 0:
        raise AddressError("column index must be non-negative")
    try:
        return get_column_letter(index + 1)
    except ValueError as e:
        raise AddressError(f"column index out of range: {index}") from e


def is_valid_reference(reference: str) -> bool:
    return bool(REFERENCE_RE.match(reference))


def _split_reference(reference: str) -> tuple[int, int]:
    """Return (0-based column, 1-based row) of a canonical reference."""
    reference = reference.strip().upper()
    if not is_valid_reference(reference):
        raise AddressError(f"invalid cell reference: {reference!r}")
    letters, row = coordinate_from_string(reference)
    return column_to_index(letters), row


def parse_address(token: str) -> CellAddress:
    """Parse ``[sheet!]REF`` into a CellAddress.

    Raises:
        AddressError: empty token, empty sheet name or reference outside the grammar
    """
    if not isinstance(token, str) or not token.strip():
        raise AddressError(f"empty cell address: {token!r}")
    token = token.strip()
    sheet_name: str | None = None
    reference = token
    if SHEET_SEPARATOR in token:
        sheet_part, reference = token.rsplit(SHEET_SEPARATOR, 1)
        sheet_part = sheet_part.strip()
        if len(sheet_part) >= 2 and sheet_part[0] == sheet_part[-1] == "'":
            sheet_part = sheet_part[1:-1].replace("''", "'")
        if not sheet_part:
            raise AddressError(f"empty sheet name in address: {token!r}")
        sheet_name = sheet_part
    reference = reference.strip().upper()
    if not is_valid_reference(reference):
        raise AddressError(f"invalid cell reference: {token!r}")
    return CellAddress(sheet_name=sheet_name, reference=reference)


@dataclass(frozen=True)
class CellRange:
    """Rectangular span, bounds inclusive (columns 0-based, rows 1-based)."""
    first_col: int
    first_row: int
    last_col: int
    last_row: int

    def contains(self, reference: str) -> bool:
        col, row = _split_reference(reference)
        return self.first_col <= col <= self.last_col and self.first_row <= row <= self.last_row

    def references(self) -> Iterator[str]:
        """Every reference covered by the range, row by row."""
        for row in range(self.first_row, self.last_row + 1):
            for col in range(self.first_col, self.last_col + 1):
                yield f"{index_to_column(col)}{row}"

    @property
    def anchor(self) -> str:
        return f"{index_to_column(self.first_col)}{self.first_row}"

    def __str__(self) -> str:
        return f"{self.anchor}:{index_to_column(self.last_col)}{self.last_row}"


def parse_range(text: str) -> CellRange:
    """Parse ``A1:B2`` (or a single ``A1``) into a normalized CellRange."""
    parts = [p.strip().upper() for p in text.split(":")]
    if len(parts) > 2 or not all(is_valid_reference(p) for p in parts):
        raise AddressError(f"invalid range: {text!r}")
    try:
        c1, r1, c2, r2 = range_boundaries(":".join(parts))
    except ValueError as e:
        raise AddressError(f"invalid range: {text!r}") from e
    # corners may be given in any order; bounds are 1-based here
    return CellRange(min(c1, c2) - 1, min(r1, r2), max(c1, c2) - 1, max(r1, r2))


def find_merge_range(sheet: Sheet, reference: str) -> str | None:
    """Merge range the reference belongs to, from the cell record or the sheet's ranges."""
    cell = sheet.get(reference)
    if cell is not None and cell.merge_range:
        return cell.merge_range
    for text in sheet.merge_ranges:
        if parse_range(text).contains(reference):
            return text
    return None


@dataclass(frozen=True)
class ResolvedCell:
    """Owning sheet, canonical reference and cell record of a resolved address."""
    sheet: Sheet
    reference: str
    cell: CellRecord
    merge_range: str | None = None

    @property
    def sheet_name(self) -> str:
        return self.sheet.name

    @property
    def is_merged(self) -> bool:
        return self.cell.is_merged or self.merge_range is not None


def resolve(token: str | CellAddress, snapshot: Snapshot) -> ResolvedCell | None:
    """Locate the sheet and cell record an address points to.

    Returns None (not found) when a named sheet is missing, or when no sheet
    holds the reference. Raises AddressError for tokens outside the grammar.
    """
    address = token if isinstance(token, CellAddress) else parse_address(token)
    if address.sheet_name is not None:
        candidates: tuple[Sheet, ...] = ()
        sheet = snapshot.get_sheet(address.sheet_name)
        if sheet is not None:
            candidates = (sheet,)
    else:
        candidates = snapshot.sheets

    for sheet in candidates:
        cell = sheet.get(address.reference)
        if cell is None:
            continue
        return ResolvedCell(
            sheet=sheet,
            reference=address.reference,
            cell=cell,
            merge_range=find_merge_range(sheet, address.reference),
        )

    logger.debug("address not found: %s in %s", address, snapshot.file_name)
    return None
