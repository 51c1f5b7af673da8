from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..contracts import MAPPING_SCHEMA_PATH
from ..models.mapping_schema import MappingSchema, SchemaError

"""Local JSON persistence for mapping schemas.

Documents use the camelCase persisted shape and are checked against
contracts/mapping_schema.json before a MappingSchema is built. One schema per
file, named ``<schemaId>.json``.
"""

__all__ = [
    "schema_from_dict",
    "save_schema",
    "load_schema",
]

logger = logging.getLogger(__name__)

_mapping_schema: dict[str, Any] | None = None


def _contract() -> dict[str, Any]:
    global _mapping_schema
    if _mapping_schema is None:
        _mapping_schema = json.loads(MAPPING_SCHEMA_PATH.read_text(encoding="utf-8"))
    return _mapping_schema


def schema_from_dict(data: dict[str, Any]) -> MappingSchema:
    """Validate a persisted document and build the MappingSchema.

    Raises:
        SchemaError: the document fails the contract or repeats a field id
    """
    try:
        jsonschema.validate(data, _contract())
    except ValidationError as e:
        raise SchemaError(f"schema validation failed: {e.message}") from e
    return MappingSchema.from_dict(data)


def save_schema(schema: MappingSchema, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{schema.schema_id}.json"
    path.write_text(json.dumps(schema.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.debug("schema %s saved to %s", schema.schema_id, path)
    return path


def load_schema(path: Path) -> MappingSchema:
    if not path.exists():
        raise SchemaError(f"schema file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SchemaError(f"invalid schema json: {e}") from e
    if not isinstance(data, dict):
        raise SchemaError(f"schema must be a JSON object: {path}")
    return schema_from_dict(data)
