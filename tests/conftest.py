# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

import pytest

from sheetmap.excel.snapshot import snapshot_from_dict
from sheetmap.logging.init import reset_logging
from sheetmap.models.snapshot import Snapshot


def make_snapshot_doc(
    sheets: dict[str, dict[str, Any]],
    file_name: str = "book.xlsx",
    merges: dict[str, list[str]] | None = None,
) -> dict[str, Any]:
    """Snapshot document from ``{sheet: {ref: value}}``."""
    merges = merges or {}
    doc_sheets: dict[str, Any] = {}
    for name, values in sheets.items():
        doc_sheets[name] = {
            "rowCount": 10,
            "colCount": 5,
            "cells": {ref: {"value": value, "isMerged": False} for ref, value in values.items()},
            "mergeRanges": merges.get(name, []),
        }
    return {"fileName": file_name, "sheets": doc_sheets}


def make_snapshot(
    sheets: dict[str, dict[str, Any]],
    file_name: str = "book.xlsx",
    merges: dict[str, list[str]] | None = None,
) -> Snapshot:
    return snapshot_from_dict(make_snapshot_doc(sheets, file_name, merges))


def write_snapshot(directory: Path, name: str, sheets: dict[str, dict[str, Any]]) -> Path:
    path = directory / name
    path.write_text(json.dumps(make_snapshot_doc(sheets, file_name=name)), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        (p / "schemas").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("SHEETMAP_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
schema_directory: ./schemas
logs_directory: ./logs
schema_defaults:
  version: "1.0"
  name: Facturas
default_year: 2024
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sheetmap.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def invoice_snapshot() -> Snapshot:
    return make_snapshot(
        {
            "Hoja1": {"A1": "ACME", "B1": 123, "C1": "22/11/2024", "D1": ""},
            "Resumen": {"A1": "Total", "B2": 45000},
        },
        file_name="factura.xlsx",
    )
