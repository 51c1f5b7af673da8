from __future__ import annotations

from dataclasses import replace

import pytest

from sheetmap.models.mapping_schema import FieldMapping, MappingSchema, SchemaError
from sheetmap.services.extractor import ensure_well_formed, extract
from sheetmap.services.schema_builder import build_schema
from sheetmap.services.schema_validator import validate_schema

from conftest import make_snapshot


def _schema(*fields: FieldMapping) -> MappingSchema:
    return MappingSchema(schema_id="s1", created_at="2024-11-22T10:00:00Z", fields=fields)


def test_end_to_end_scenario():
    snap = make_snapshot({"Hoja1": {"A1": "ACME", "B1": 123}})
    schema = build_schema([("A1", "empresa"), ("B1", "monto")], snap)

    assert validate_schema(snap, schema).valid is True
    result = extract(snap, schema)
    assert result.data == {"empresa": "ACME", "monto": 123}
    assert result.warnings == []

    emptied = make_snapshot({"Hoja1": {"A1": "ACME", "B1": None}})
    result = extract(emptied, schema)
    assert result.data == {"empresa": "ACME", "monto": None}
    assert len(result.warnings) == 1
    assert "B1" in result.warnings[0]
    assert result.warnings[0] == "No value at Hoja1!B1 for field 'monto'"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_cell_gives_null_and_one_warning(value):
    snap = make_snapshot({"S": {"A1": value}})
    result = extract(snap, _schema(FieldMapping("f1", "campo", "S", "A1")))
    assert result.data == {"campo": None}
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("No value at")


def test_absent_cell_behaves_like_empty():
    snap = make_snapshot({"S": {"A1": "x"}})
    result = extract(snap, _schema(FieldMapping("f1", "campo", "S", "C7")))
    assert result.data == {"campo": None}
    assert result.warnings == ["No value at S!C7 for field 'campo'"]


def test_missing_sheet_never_raises():
    snap = make_snapshot({"S": {"A1": "x"}})
    schema = _schema(
        FieldMapping("f1", "a", "Borrada", "A1"),
        FieldMapping("f2", "b", "Borrada", "B1"),
        FieldMapping("f3", "c", "S", "A1"),
    )
    result = extract(snap, schema)
    assert result.data == {"a": None, "b": None, "c": "x"}
    assert result.warnings == [
        "Sheet 'Borrada' not found for field 'a'",
        "Sheet 'Borrada' not found for field 'b'",
    ]


def test_field_without_sheet_name():
    snap = make_snapshot({"S": {"A1": "x"}})
    result = extract(snap, _schema(FieldMapping("f1", "a", None, "A1")))
    assert result.data == {"a": None}
    assert result.warnings == ["Sheet '<unknown>' not found for field 'a'"]


def test_values_are_not_coerced():
    snap = make_snapshot({"S": {"A1": "22/11/2024", "B1": 45000, "C1": "  padded  ", "D1": True}})
    schema = _schema(
        FieldMapping("f1", "texto", "S", "A1"),
        FieldMapping("f2", "serial", "S", "B1"),
        FieldMapping("f3", "relleno", "S", "C1"),
        FieldMapping("f4", "flag", "S", "D1"),
    )
    data = extract(snap, schema).data
    assert data == {"texto": "22/11/2024", "serial": 45000, "relleno": "  padded  ", "flag": True}


def test_sample_value_is_not_authoritative():
    snap = make_snapshot({"S": {"A1": "nuevo"}})
    stale = FieldMapping("f1", "a", "S", "A1", sample_value="viejo", value_type="string")
    assert extract(snap, _schema(stale)).data == {"a": "nuevo"}


def test_one_entry_per_field(invoice_snapshot):
    schema = build_schema([("A1", "a"), ("Z50", "b"), ("Resumen!B2", "c")], invoice_snapshot)
    result = extract(invoice_snapshot, schema)
    assert set(result.data) == {"a", "b", "c"}
    assert result.data["c"] == 45000


def test_malformed_reference_aborts_before_any_field():
    snap = make_snapshot({"S": {"A1": "x"}})
    schema = _schema(FieldMapping("f1", "a", "S", "A1"), FieldMapping("f2", "b", "S", "A-1"))
    with pytest.raises(SchemaError, match="invalid cell references"):
        extract(snap, schema)
    with pytest.raises(SchemaError):
        ensure_well_formed(schema)


def test_duplicate_field_ids_rejected():
    with pytest.raises(SchemaError, match="duplicate field ids"):
        _schema(FieldMapping("f1", "a", "S", "A1"), FieldMapping("f1", "b", "S", "B1"))


def test_extract_on_unvalidated_schema(invoice_snapshot):
    schema = build_schema([("A1", "empresa")], invoice_snapshot)
    broken = replace(schema, fields=(replace(schema.fields[0], sheet_name="Nada"),))
    assert validate_schema(invoice_snapshot, broken).valid is False
    result = extract(invoice_snapshot, broken)
    assert result.data == {"empresa": None}
    assert len(result.warnings) == 1
