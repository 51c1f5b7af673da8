from __future__ import annotations

import json
from pathlib import Path

import pytest

from sheetmap.models.mapping_schema import SchemaError
from sheetmap.services.schema_builder import BuildOptions, build_schema
from sheetmap.services.schema_store import load_schema, save_schema, schema_from_dict


def _doc(**overrides):
    doc = {
        "schemaId": "facturas_v1",
        "schemaName": "Facturas",
        "version": "1.0",
        "createdAt": "2024-11-22T10:00:00Z",
        "sourceFile": "factura.xlsx",
        "fields": [
            {"id": "f1", "fieldName": "empresa", "sheetName": "Hoja1", "cellRef": "A1"},
            {"id": "f2", "fieldName": "monto", "sheetName": "Hoja1", "cellRef": "B1", "sampleValue": 123, "valueType": "number"},
        ],
    }
    doc.update(overrides)
    return doc


def test_schema_from_dict():
    schema = schema_from_dict(_doc())
    assert schema.schema_id == "facturas_v1"
    assert schema.field_names == ["empresa", "monto"]
    assert schema.fields[1].sample_value == 123
    assert schema.fields[0].is_merged is False


def test_missing_version_defaults():
    doc = _doc()
    del doc["version"]
    assert schema_from_dict(doc).version == "1.0"


@pytest.mark.parametrize(
    "overrides",
    [
        {"schemaId": ""},
        {"fields": [{"id": "f1", "fieldName": "x"}]},
        {"fields": [{"id": "f1", "fieldName": "x", "cellRef": "A1", "valueType": "fecha"}]},
        {"createdAt": 1700000000},
    ],
)
def test_contract_violations(overrides):
    with pytest.raises(SchemaError, match="schema validation failed"):
        schema_from_dict(_doc(**overrides))


def test_duplicate_ids_in_document():
    fields = [
        {"id": "f1", "fieldName": "a", "sheetName": "S", "cellRef": "A1"},
        {"id": "f1", "fieldName": "b", "sheetName": "S", "cellRef": "B1"},
    ]
    with pytest.raises(SchemaError, match="duplicate"):
        schema_from_dict(_doc(fields=fields))


def test_save_and_load(tmp_path: Path, invoice_snapshot):
    schema = build_schema([("A1", "empresa"), ("B1", "monto")], invoice_snapshot, BuildOptions(schema_id="inv"))
    path = save_schema(schema, tmp_path / "schemas")
    assert path.name == "inv.json"
    persisted = json.loads(path.read_text(encoding="utf-8"))
    # no native date objects in the persisted shape
    assert isinstance(persisted["createdAt"], str)
    assert load_schema(path) == schema


def test_load_missing(tmp_path: Path):
    with pytest.raises(SchemaError, match="not found"):
        load_schema(tmp_path / "x.json")


def test_load_invalid_json(tmp_path: Path):
    p = tmp_path / "x.json"
    p.write_text("{", encoding="utf-8")
    with pytest.raises(SchemaError, match="invalid schema json"):
        load_schema(p)
