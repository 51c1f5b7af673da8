from __future__ import annotations

import json

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from sheetmap.contracts import ISSUE_LOG_SCHEMA_PATH
from sheetmap.logging.error_log import (
    DOMAIN_NOTICE,
    MISSING_VALUE,
    SNAPSHOT_LOAD_ERROR,
    STRUCTURAL_MISMATCH,
    ErrorLogBuffer,
)
from sheetmap.models.error_record import ErrorRecord

"""Issue log JSON Lines contract: fixed key set, known error types."""

EXPECTED_KEYS = {"timestamp", "file", "schema", "error_type", "message"}


@pytest.fixture(scope="module")
def contract() -> dict:
    return json.loads(ISSUE_LOG_SCHEMA_PATH.read_text(encoding="utf-8"))


@pytest.mark.parametrize("error_type", [SNAPSHOT_LOAD_ERROR, STRUCTURAL_MISMATCH, MISSING_VALUE, DOMAIN_NOTICE])
def test_records_match_contract(contract, error_type):
    rec = json.loads(ErrorRecord.create("a.json", "inv", error_type, "msg").to_json_line())
    assert set(rec) == EXPECTED_KEYS
    jsonschema.validate(rec, contract)


def test_contract_rejects_extra_key(contract):
    rec = json.loads(ErrorRecord.create("a.json", "inv", MISSING_VALUE, "m").to_json_line())
    rec["sheet"] = "Hoja1"
    with pytest.raises(ValidationError):
        jsonschema.validate(rec, contract)


def test_contract_rejects_unknown_error_type(contract):
    rec = json.loads(ErrorRecord.create("a.json", "inv", "CONSTRAINT_VIOLATION", "m").to_json_line())
    with pytest.raises(ValidationError):
        jsonschema.validate(rec, contract)


def test_flushed_file_lines_match_contract(tmp_path, contract):
    buf = ErrorLogBuffer(tmp_path)
    buf.add("a.json", "inv", MISSING_VALUE, "No value at Hoja1!B1 for field 'monto'")
    buf.add("b.json", "inv", STRUCTURAL_MISMATCH, "Sheet 'Hoja1' for field 'monto' (id=f2) not found in workbook")
    path = buf.flush()
    for line in path.read_text(encoding="utf-8").splitlines():
        jsonschema.validate(json.loads(line), contract)
