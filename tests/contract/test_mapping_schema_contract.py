from __future__ import annotations

import json

import jsonschema

from sheetmap.contracts import MAPPING_SCHEMA_PATH
from sheetmap.services.schema_builder import build_schema

from conftest import make_snapshot

"""Persisted mapping schema shape: camelCase keys, JSON-only values."""

SCHEMA_KEYS = {"schemaId", "schemaName", "version", "createdAt", "sourceFile", "fields", "metadata"}
FIELD_KEYS = {"id", "fieldName", "sheetName", "cellRef", "sampleValue", "valueType", "isMerged", "mergeRange"}


def _persisted() -> dict:
    snap = make_snapshot({"Hoja1": {"A1": "ACME", "B1": 123}}, merges={"Hoja1": ["A1:A2"]})
    schema = build_schema([("A1", "empresa"), ("B1", "monto"), ("Z9", "pendiente")], snap)
    # through a JSON round trip, as an external store would hold it
    return json.loads(json.dumps(schema.to_dict()))


def test_key_sets():
    doc = _persisted()
    assert set(doc) == SCHEMA_KEYS
    for f in doc["fields"]:
        assert set(f) == FIELD_KEYS


def test_validates_against_contract():
    contract = json.loads(MAPPING_SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(_persisted(), contract)


def test_field_values():
    fields = _persisted()["fields"]
    assert fields[0] == {
        "id": "f1",
        "fieldName": "empresa",
        "sheetName": "Hoja1",
        "cellRef": "A1",
        "sampleValue": "ACME",
        "valueType": "string",
        "isMerged": True,
        "mergeRange": "A1:A2",
    }
    assert fields[2]["sheetName"] is None
    assert fields[2]["valueType"] is None
