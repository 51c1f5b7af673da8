from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from sheetmap.config.loader import AppConfig, ConfigError, default_config_path, load_config
from sheetmap.dates import normalize
from sheetmap.excel.address import AddressError
from sheetmap.excel.snapshot import SnapshotError, load_snapshot
from sheetmap.logging.init import log_summary, setup_logging
from sheetmap.models.mapping_schema import SchemaError
from sheetmap.services.domains import DomainType
from sheetmap.services.orchestrator import ProcessingError, process_all
from sheetmap.services.schema_builder import BuildOptions, build_schema
from sheetmap.services.schema_store import load_schema, save_schema
from sheetmap.services.schema_validator import validate_schema
from sheetmap.services.summary import render_summary_line

"""Command line entry point.

Subcommands:

- ``build``    author a mapping schema from a snapshot and a list of address/field pairs
- ``validate`` check a schema against one snapshot
- ``extract``  apply a schema to every snapshot under ``source_directory``
- ``date``     show how cell values are read as dates

Exit codes: 0 success, 1 fatal (config, missing files, malformed schema),
2 partial failure (some snapshots failed, or the schema does not fit).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sheetmap", description="Spreadsheet cell mapping and extraction")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: $SHEETMAP_CONFIG or config/sheetmap.yml)")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Build a mapping schema from a snapshot")
    b.add_argument("--snapshot", type=Path, required=True, help="Authoring snapshot JSON")
    b.add_argument("--mapping", type=Path, required=True, help="YAML/JSON list of {address, field}")
    b.add_argument("--schema-id", default=None)
    b.add_argument("--name", default=None)
    b.add_argument("--version", default=None)
    b.add_argument("--out", type=Path, default=None, help="Output directory (default: schema_directory)")

    v = sub.add_parser("validate", help="Check a schema against a snapshot")
    v.add_argument("--schema", type=Path, required=True)
    v.add_argument("--snapshot", type=Path, required=True)

    e = sub.add_parser("extract", help="Apply a schema to every snapshot in source_directory")
    e.add_argument("--schema", type=Path, required=True)
    e.add_argument("--domain", choices=[d.value for d in DomainType], default=None)
    e.add_argument("--out", type=Path, default=None, help="Write extracted records as JSON")

    d = sub.add_parser("date", help="Normalize values as spreadsheet dates")
    d.add_argument("values", nargs="+")

    return p.parse_args(argv)


def _read_mapping(path: Path) -> list[tuple[str, str]]:
    """Read ``[{address, field}, ...]`` from a YAML or JSON file."""
    if not path.exists():
        raise SchemaError(f"mapping file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SchemaError(f"invalid mapping file: {e}") from e
    if not isinstance(data, list):
        raise SchemaError("mapping file must hold a list of {address, field} entries")
    pairs: list[tuple[str, str]] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict) or "address" not in entry or "field" not in entry:
            raise SchemaError(f"mapping entry #{i + 1} needs 'address' and 'field'")
        pairs.append((str(entry["address"]), str(entry["field"])))
    return pairs


def _cmd_build(args: argparse.Namespace, cfg: AppConfig | None, logger: Any) -> int:
    out_dir = args.out
    if out_dir is None:
        if cfg is None:
            logger.error("build: no --out given and no config to take schema_directory from")
            return EXIT_FATAL
        out_dir = Path(cfg.schema_directory)
    try:
        snapshot = load_snapshot(args.snapshot)
        pairs = _read_mapping(args.mapping)
        options = BuildOptions(
            schema_id=args.schema_id,
            schema_name=args.name or (cfg.schema_name if cfg else None),
            version=args.version or (cfg.schema_version if cfg else "1.0"),
        )
        schema = build_schema(pairs, snapshot, options)
    except (SnapshotError, SchemaError, AddressError) as e:
        logger.error(f"build: {e}")
        return EXIT_FATAL

    try:
        path = save_schema(schema, out_dir)
    except OSError as e:
        logger.error(f"build: could not write schema to {out_dir}: {e}")
        return EXIT_FATAL
    logger.info(f"schema {schema.schema_id} with {len(schema.fields)} field(s) written to {path}")
    return EXIT_SUCCESS_ALL


def _cmd_validate(args: argparse.Namespace, logger: Any) -> int:
    try:
        schema = load_schema(args.schema)
        snapshot = load_snapshot(args.snapshot)
    except (SchemaError, SnapshotError) as e:
        logger.error(f"validate: {e}")
        return EXIT_FATAL

    result = validate_schema(snapshot, schema)
    if result.valid:
        logger.info(f"schema {schema.schema_id} fits {snapshot.file_name}")
        return EXIT_SUCCESS_ALL
    for message in result.errors:
        logger.warning(message)
    logger.error(f"schema {schema.schema_id} does not fit {snapshot.file_name}: {len(result.errors)} error(s)")
    return EXIT_PARTIAL_FAILURE


def _cmd_extract(args: argparse.Namespace, cfg: AppConfig, logger: Any) -> int:
    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL
    try:
        schema = load_schema(args.schema)
    except SchemaError as e:
        logger.error(f"schema: {e}")
        return EXIT_FATAL

    logger.info(f"Extracting {schema.schema_id} from: {directory}")
    try:
        result = process_all(cfg, schema, domain=args.domain)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if args.out is not None:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.to_dict() for r in result.records or []]
        args.out.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info(f"{len(payload)} record(s) written to {args.out}")

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary adds the SUMMARY label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_date(args: argparse.Namespace) -> int:
    for value in args.values:
        print(json.dumps(normalize(value).to_dict(), ensure_ascii=False))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)

    # .env first so SHEETMAP_CONFIG can come from it
    _load_env_file(Path(".env"), override=True)

    if args.command == "date":
        return _cmd_date(args)
    if args.command == "validate":
        return _cmd_validate(args, logger)

    config_path = args.config or default_config_path()
    cfg: AppConfig | None = None
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        # build can run without a config when --out is given
        if args.command != "build" or args.config is not None or config_path.exists():
            logger.error(f"config: {e}")
            return EXIT_FATAL
        logger.debug(f"config: {e}")

    if args.command == "build":
        return _cmd_build(args, cfg, logger)
    if cfg is None:
        return EXIT_FATAL
    return _cmd_extract(args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
