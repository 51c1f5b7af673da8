"""JSON Schema documents for configuration, persisted mapping schemas and snapshots."""

from pathlib import Path

CONTRACTS_DIR = Path(__file__).parent

CONFIG_SCHEMA_PATH = CONTRACTS_DIR / "config_schema.json"
MAPPING_SCHEMA_PATH = CONTRACTS_DIR / "mapping_schema.json"
SNAPSHOT_SCHEMA_PATH = CONTRACTS_DIR / "snapshot_schema.json"
ISSUE_LOG_SCHEMA_PATH = CONTRACTS_DIR / "issue_log_schema.json"
