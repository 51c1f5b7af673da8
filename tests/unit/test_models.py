from __future__ import annotations

from datetime import date

from sheetmap.models import CellRecord, ExtractedFile, FieldMapping, MappingSchema, Sheet, Snapshot


def test_cell_record_blank():
    assert CellRecord().is_blank
    assert CellRecord(value="  ").is_blank
    assert not CellRecord(value=0).is_blank


def test_snapshot_lookup():
    snap = Snapshot("f.xlsx", sheets=(Sheet("A", cells={"A1": CellRecord(1)}), Sheet("B")))
    assert snap.sheet_names == ["A", "B"]
    assert snap.get_sheet("B").name == "B"
    assert snap.get_sheet("C") is None
    assert snap.get_sheet(None) is None
    assert snap.get_sheet("A").has_cell("A1")


def test_mapping_schema_dict_round_trip():
    schema = MappingSchema(
        schema_id="s",
        created_at="2024-11-22T10:00:00Z",
        schema_name="Demo",
        fields=(FieldMapping("f1", "a", "S", "A1", sample_value=1.5, value_type="number", is_merged=True, merge_range="A1:B1"),),
        metadata={"autor": "ops"},
    )
    assert MappingSchema.from_dict(schema.to_dict()) == schema
    assert schema.field_names == ["a"]


def test_extracted_file_to_dict_renders_dates():
    ef = ExtractedFile("a.json", {"fecha": 45000}, [], record={"fecha": date(2023, 3, 15), "n": 2})
    assert ef.to_dict() == {
        "file": "a.json",
        "data": {"fecha": 45000},
        "warnings": [],
        "record": {"fecha": "2023-03-15", "n": 2},
    }
