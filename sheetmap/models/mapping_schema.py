from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..dates import RawValue

"""Mapping schema, validation verdict and extraction result models.

The persisted (JSON) shape uses camelCase keys and carries no language-native
date objects: ``createdAt`` is an ISO-8601 UTC string. ``sample_value`` and
``value_type`` are advisory snapshots of the authoring workbook and are never
consulted during extraction.
"""

__all__ = [
    "SchemaError",
    "FieldMapping",
    "MappingSchema",
    "ValidationResult",
    "ExtractionResult",
]


class SchemaError(Exception):
    """Malformed mapping schema (duplicate ids, bad references, bad document)."""


@dataclass(frozen=True)
class FieldMapping:
    """One field-name -> cell association inside a MappingSchema."""
    id: str
    field_name: str
    sheet_name: str | None
    cell_ref: str
    sample_value: RawValue = None  # advisory
    value_type: str | None = None  # advisory: empty|number|boolean|date|string
    is_merged: bool = False
    merge_range: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fieldName": self.field_name,
            "sheetName": self.sheet_name,
            "cellRef": self.cell_ref,
            "sampleValue": self.sample_value,
            "valueType": self.value_type,
            "isMerged": self.is_merged,
            "mergeRange": self.merge_range,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> FieldMapping:
        return FieldMapping(
            id=data["id"],
            field_name=data["fieldName"],
            sheet_name=data.get("sheetName"),
            cell_ref=data["cellRef"],
            sample_value=data.get("sampleValue"),
            value_type=data.get("valueType"),
            is_merged=bool(data.get("isMerged", False)),
            merge_range=data.get("mergeRange"),
        )


@dataclass(frozen=True)
class MappingSchema:
    """Versioned set of field mappings, authored once and reapplied to similar workbooks.

    Field ids are unique within a schema; construction fails otherwise.
    """
    schema_id: str
    created_at: str  # ISO-8601 UTC
    fields: tuple[FieldMapping, ...] = ()
    schema_name: str | None = None
    version: str = "1.0"
    source_file: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        duplicates: list[str] = []
        for f in self.fields:
            if f.id in seen:
                duplicates.append(f.id)
            seen.add(f.id)
        if duplicates:
            raise SchemaError(f"duplicate field ids in schema '{self.schema_id}': {sorted(set(duplicates))}")

    @property
    def field_names(self) -> list[str]:
        return [f.field_name for f in self.fields]

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaId": self.schema_id,
            "schemaName": self.schema_name,
            "version": self.version,
            "createdAt": self.created_at,
            "sourceFile": self.source_file,
            "fields": [f.to_dict() for f in self.fields],
            "metadata": dict(self.metadata),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> MappingSchema:
        """Build from the persisted shape. Structural checks live in services.schema_store."""
        return MappingSchema(
            schema_id=data["schemaId"],
            schema_name=data.get("schemaName"),
            version=data.get("version") or "1.0",
            created_at=data["createdAt"],
            source_file=data.get("sourceFile"),
            fields=tuple(FieldMapping.from_dict(f) for f in data.get("fields", [])),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class ValidationResult:
    """Structural compatibility verdict. ``valid`` iff ``errors`` is empty."""
    valid: bool
    errors: list[str]

    @staticmethod
    def from_errors(errors: list[str]) -> ValidationResult:
        return ValidationResult(valid=not errors, errors=list(errors))


@dataclass(frozen=True)
class ExtractionResult:
    """Field-name -> raw value record plus non-fatal warnings.

    ``data`` holds one entry per schema field (value may be None); one
    warning is emitted per field whose value was missing or empty.
    """
    data: dict[str, RawValue]
    warnings: list[str]
