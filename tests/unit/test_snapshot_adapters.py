from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from sheetmap.excel.snapshot import SnapshotError, load_snapshot, snapshot_from_dict, snapshot_from_frames

from conftest import make_snapshot_doc


class TestSnapshotFromDict:
    def test_mapping_of_sheets(self):
        snap = snapshot_from_dict(make_snapshot_doc({"Hoja1": {"a1": "ACME"}, "Hoja2": {}}))
        assert snap.file_name == "book.xlsx"
        assert snap.sheet_names == ["Hoja1", "Hoja2"]
        # references are canonicalized
        assert snap.get_sheet("Hoja1").get("A1").value == "ACME"

    def test_list_of_sheets(self):
        doc = {
            "sheets": [
                {"name": "B", "cells": {"A1": {"value": 1}}},
                {"name": "A", "cells": {}},
            ]
        }
        snap = snapshot_from_dict(doc)
        assert snap.sheet_names == ["B", "A"]
        assert snap.file_name == "<memory>"

    def test_duplicate_sheet_names_rejected(self):
        doc = {"sheets": [{"name": "A", "cells": {}}, {"name": "A", "cells": {}}]}
        with pytest.raises(SnapshotError, match="duplicate sheet names"):
            snapshot_from_dict(doc)

    def test_cell_keys_differing_only_in_case_rejected(self):
        doc = make_snapshot_doc({"Hoja1": {"a1": "x", "A1": "y"}})
        with pytest.raises(SnapshotError, match="duplicate cell reference A1"):
            snapshot_from_dict(doc)

    def test_contract_violation(self):
        with pytest.raises(SnapshotError, match="snapshot validation failed"):
            snapshot_from_dict({"sheets": {"A": {"cells": {"A1": {"value": [1, 2]}}}}})

    def test_bad_merge_range(self):
        doc = make_snapshot_doc({"Hoja1": {}}, merges={"Hoja1": ["A1:??"]})
        with pytest.raises(SnapshotError, match="Hoja1"):
            snapshot_from_dict(doc)

    def test_merge_flags_kept(self):
        doc = {
            "sheets": {
                "Hoja1": {
                    "cells": {"A1": {"value": "x", "isMerged": True, "mergeRange": "A1:B1"}},
                    "mergeRanges": ["A1:B1"],
                }
            }
        }
        cell = snapshot_from_dict(doc).get_sheet("Hoja1").get("A1")
        assert cell.is_merged is True
        assert cell.merge_range == "A1:B1"


class TestLoadSnapshot:
    def test_load(self, tmp_path: Path):
        p = tmp_path / "f.json"
        p.write_text(json.dumps({"sheets": {"S": {"cells": {"A1": {"value": 5}}}}}), encoding="utf-8")
        snap = load_snapshot(p)
        assert snap.file_name == "f.json"
        assert snap.get_sheet("S").get("A1").value == 5

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(SnapshotError, match="not found"):
            load_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path):
        p = tmp_path / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError, match="invalid snapshot json"):
            load_snapshot(p)

    def test_non_object(self, tmp_path: Path):
        p = tmp_path / "list.json"
        p.write_text("[]", encoding="utf-8")
        with pytest.raises(SnapshotError):
            load_snapshot(p)


class TestSnapshotFromFrames:
    def test_grid_to_cells(self):
        df = pd.DataFrame([["Empresa", "ACME"], ["Monto", np.int64(123)], [np.nan, 1.5]])
        snap = snapshot_from_frames({"Hoja1": df}, "book.xlsx")
        sheet = snap.get_sheet("Hoja1")
        assert sheet.row_count == 3
        assert sheet.col_count == 2
        assert sheet.get("B1").value == "ACME"
        assert sheet.get("B2").value == 123
        assert isinstance(sheet.get("B2").value, int)
        assert sheet.get("B3").value == 1.5
        assert sheet.get("A3") is None

    def test_datetimes_become_serials(self):
        df = pd.DataFrame([[pd.Timestamp(datetime(2023, 3, 15))]])
        snap = snapshot_from_frames({"S": df}, "book.xlsx")
        assert snap.get_sheet("S").get("A1").value == 45000

    def test_merge_ranges_cover_cells(self):
        df = pd.DataFrame([["Titulo", np.nan], [1, 2]])
        snap = snapshot_from_frames({"S": df}, "book.xlsx", merge_ranges={"S": ["A1:B1"]})
        sheet = snap.get_sheet("S")
        assert sheet.get("A1").is_merged is True
        assert sheet.get("A1").value == "Titulo"
        assert sheet.get("B1").is_merged is True
        assert sheet.get("B1").value is None
        assert sheet.get("A2").is_merged is False
        assert sheet.merge_ranges == ("A1:B1",)
