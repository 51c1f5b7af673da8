from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AppConfig
from ..excel.snapshot import SnapshotError, load_snapshot
from ..logging.error_log import (
    DOMAIN_NOTICE,
    MISSING_VALUE,
    SNAPSHOT_LOAD_ERROR,
    STRUCTURAL_MISMATCH,
    ErrorLogBuffer,
)
from ..models.mapping_schema import MappingSchema, SchemaError
from ..models.processing_result import ExtractedFile, FileStat, FileStatus, ProcessingResult
from .domains import DomainType, build_record, resolve_domain
from .extractor import ensure_well_formed, extract
from .progress import ProgressTracker
from .schema_validator import validate_schema

"""Batch orchestration: apply one mapping schema to every snapshot in a directory.

For each ``*.json`` snapshot file (non-recursive, sorted by name): load,
validate against the schema, extract, and optionally build a domain record.
A file that cannot be loaded or whose structure mismatches the schema is
counted as failed and logged; the remaining files are still processed.
Issues are buffered and flushed once to the issue log at the end.
"""

__all__ = [
    "ProcessingError",
    "scan_snapshot_files",
    "process_file",
    "process_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal batch error (missing source directory, malformed schema)."""


@dataclass
class _FileOutcome:
    status: FileStatus
    extracted: ExtractedFile | None = None
    errors: list[str] = field(default_factory=list)


def scan_snapshot_files(directory: Path) -> list[Path]:
    """Snapshot JSON files in ``directory`` (non-recursive, sorted by name).

    Raises:
        ProcessingError: directory missing, not a directory, or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".json")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def process_file(
    path: Path,
    schema: MappingSchema,
    error_log: ErrorLogBuffer,
    domain: DomainType | None = None,
    default_year: int | None = None,
) -> _FileOutcome:
    """Load, validate and extract one snapshot file, recording issues in ``error_log``."""
    try:
        snapshot = load_snapshot(path)
    except SnapshotError as e:
        logger.error(f"{path.name}: {e}")
        error_log.add(path.name, schema.schema_id, SNAPSHOT_LOAD_ERROR, str(e))
        return _FileOutcome(status=FileStatus.FAILED, errors=[str(e)])

    verdict = validate_schema(snapshot, schema)
    if not verdict.valid:
        logger.warning(f"{path.name}: {len(verdict.errors)} structural mismatch(es) with schema {schema.schema_id}")
        for message in verdict.errors:
            error_log.add(path.name, schema.schema_id, STRUCTURAL_MISMATCH, message)
        return _FileOutcome(status=FileStatus.INVALID, errors=list(verdict.errors))

    result = extract(snapshot, schema)
    for message in result.warnings:
        error_log.add(path.name, schema.schema_id, MISSING_VALUE, message)

    record = None
    if domain is not None:
        domain_record = build_record(result, domain, default_year=default_year)
        for notice in domain_record.notices:
            error_log.add(path.name, schema.schema_id, DOMAIN_NOTICE, notice)
        record = domain_record.values

    return _FileOutcome(
        status=FileStatus.SUCCESS,
        extracted=ExtractedFile(
            file_name=path.name,
            data=dict(result.data),
            warnings=list(result.warnings),
            record=record,
        ),
    )


def process_all(
    config: AppConfig,
    schema: MappingSchema,
    domain: DomainType | str | None = None,
) -> ProcessingResult:
    """Apply ``schema`` to every snapshot file under ``config.source_directory``.

    Args:
        config: application configuration
        schema: mapping schema to apply
        domain: domain record to build per file; falls back to ``config.domain``,
            no domain record when both are None

    Returns:
        ProcessingResult with per-file stats and extracted records

    Raises:
        ProcessingError: schema malformed, unknown domain or unusable source directory
    """
    start_time = datetime.now(UTC)

    try:
        ensure_well_formed(schema)
    except SchemaError as e:
        raise ProcessingError(f"Invalid schema: {e}") from e

    domain_name = domain if domain is not None else config.domain
    try:
        domain_type = resolve_domain(domain_name) if domain_name is not None else None
    except ValueError as e:
        raise ProcessingError(str(e)) from e

    file_paths = scan_snapshot_files(Path(config.source_directory))
    error_log = ErrorLogBuffer(Path(config.logs_directory))

    file_stats: list[FileStat] = []
    records: list[ExtractedFile] = []
    success_count = 0
    failed_count = 0
    total_fields = 0
    total_warnings = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            file_start = datetime.now(UTC)

            outcome = process_file(file_path, schema, error_log, domain_type, config.default_year)

            file_elapsed = (datetime.now(UTC) - file_start).total_seconds()
            extracted_fields = 0
            warnings = 0
            if outcome.status is FileStatus.SUCCESS and outcome.extracted is not None:
                success_count += 1
                extracted_fields = sum(1 for v in outcome.extracted.data.values() if v is not None)
                warnings = len(outcome.extracted.warnings)
                total_fields += extracted_fields
                total_warnings += warnings
                records.append(outcome.extracted)
            else:
                failed_count += 1

            progress.set_postfix(success=success_count, failed=failed_count, fields=total_fields)
            progress.finish_file()

            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status=outcome.status.value,
                    extracted_fields=extracted_fields,
                    warnings=warnings,
                    elapsed_seconds=file_elapsed,
                    errors=outcome.errors,
                )
            )

    try:
        log_path = error_log.flush()
    except OSError as e:
        # the run itself succeeded; losing the issue log is reported, not fatal
        logger.error(f"could not write issue log: {e}")
    else:
        if log_path is not None:
            logger.info(f"issues written to {log_path}")

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_fields=total_fields,
        total_warnings=total_warnings,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        records=records,
    )
