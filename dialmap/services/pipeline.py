from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer
from ..models.aggregated import AggregatedOutput
from ..models.config_models import PipelineConfig
from ..models.error_record import ErrorRecord
from ..models.issues import PipelineIssue
from ..models.processing_result import (
    AggregationResult,
    AggregationStats,
    FileStat,
    ParseResult,
    PipelineResult,
    RunResult,
)
from ..models.product_record import ProductRecord
from ..parsing.headers import reconcile_headers
from ..parsing.normalizer import normalize_row
from ..parsing.tokenizer import parse_document
from .aggregator import aggregate
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Pipeline orchestration for the dial data.

parse_csv and transform_data are the two boundaries of the core: data
problems inside them become counted issues, never exceptions. process_files
wraps them for a CLI run over several CSV files (one output JSON per file,
one error log per run).
"""

__all__ = [
    "ProcessingError",
    "parse_csv",
    "transform_data",
    "run_pipeline",
    "scan_csv_files",
    "read_csv_text",
    "write_output",
    "process_files",
]


class ProcessingError(Exception):
    """Fatal run-level input error: missing, unreadable or non-directory input path.

    Per-file read/write failures are not raised; process_files records them
    as FILE_READ_ERROR / OUTPUT_WRITE_ERROR and moves on.
    """


def parse_csv(text: str, *, source: str = "<memory>") -> ParseResult:
    """Tokenize, reconcile headers and normalize every row of one CSV text.

    Args:
        text: full CSV text (header on the first line)
        source: label used in log messages

    Returns:
        ParseResult with retained records, reconciliation and row counters
    """
    doc = parse_document(text)
    if not doc.headers:
        logger.warning(f"{source}: no header row")
        return ParseResult(records=[], reconciliation=None)

    reconciliation = reconcile_headers(doc.headers)
    issues: list[PipelineIssue] = list(doc.issues)
    records: list[ProductRecord] = []
    invalid = len(doc.issues)

    for row in doc.rows:
        try:
            records.append(normalize_row(row, doc.headers, reconciliation))
        except PipelineIssue as e:
            logger.warning(f"{source} line {row.line_number}: {e.message}, row skipped")
            issues.append(e)
            invalid += 1

    logger.info(f"{source}: parsed valid_rows={len(records)} invalid_rows={invalid}")
    return ParseResult(
        records=records,
        reconciliation=reconciliation,
        valid_rows=len(records),
        invalid_rows=invalid,
        issues=issues,
    )


def transform_data(records: Iterable[ProductRecord], config: PipelineConfig) -> AggregationResult:
    """Aggregate records into the renderer output using the given config."""
    return aggregate(records, config.taxonomy, config.mappings)


def run_pipeline(text: str, config: PipelineConfig, *, source: str = "<memory>") -> PipelineResult:
    """CSV text -> AggregatedOutput (plus counters and issues)."""
    parsed = parse_csv(text, source=source)
    aggregated = transform_data(parsed.records, config)
    return PipelineResult(output=aggregated.output, parse=parsed, aggregation=aggregated)


def scan_csv_files(directory: Path) -> list[Path]:
    """Scan directory for .csv files (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def read_csv_text(path: Path) -> str:
    """Read a CSV file as UTF-8 (a leading BOM is dropped)."""
    return path.read_text(encoding="utf-8-sig")


def write_output(output: AggregatedOutput, path: Path) -> Path:
    """Write the renderer JSON (``{structure, appsByPath}``)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(output.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def _failed_stat(file_path: Path, start: datetime, error: str) -> FileStat:
    return FileStat(
        file_name=file_path.name,
        status="failed",
        records=0,
        invalid_rows=0,
        skipped=0,
        elapsed_seconds=(datetime.now(UTC) - start).total_seconds(),
        error=error,
    )


def process_files(
    paths: list[Path],
    config: PipelineConfig,
    *,
    output_directory: Path | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Run the pipeline over each CSV file.

    Each file is independent: an unreadable file is counted as failed and the
    run moves on. Outputs go to ``<output_directory>/<stem>.json``.
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    out_dir = output_directory if output_directory is not None else Path(config.output_directory)

    file_stats: list[FileStat] = []
    outputs: dict[str, AggregatedOutput] = {}
    success = failed = 0
    total_records = total_invalid = total_skipped = 0

    with ProgressTracker(len(paths), description="Processing files") as progress:
        for file_path in paths:
            progress.start_file(file_path)
            file_start = datetime.now(UTC)

            try:
                text = read_csv_text(file_path)
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"{file_path.name}: read failed: {e}")
                error_log.append(ErrorRecord.create(file_path.name, -1, "FILE_READ_ERROR", str(e)))
                file_stats.append(_failed_stat(file_path, file_start, str(e)))
                failed += 1
                progress.finish_file(success=False)
                continue

            result = run_pipeline(text, config, source=file_path.name)
            error_log.extend_issues(file_path.name, result.issues)
            if result.parse.reconciliation is None:
                error_log.append(ErrorRecord.create(file_path.name, -1, "EMPTY_FILE", "no header row"))

            try:
                out_path = write_output(result.output, out_dir / f"{file_path.stem}.json")
            except OSError as e:
                logger.error(f"{file_path.name}: output write failed: {e}")
                error_log.append(ErrorRecord.create(file_path.name, -1, "OUTPUT_WRITE_ERROR", str(e)))
                file_stats.append(_failed_stat(file_path, file_start, str(e)))
                failed += 1
                progress.finish_file(success=False)
                continue

            stats: AggregationStats = result.aggregation.stats
            success += 1
            total_records += stats.processed
            total_invalid += result.parse.invalid_rows
            total_skipped += stats.skipped
            outputs[file_path.name] = result.output
            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status="success",
                    records=stats.processed,
                    invalid_rows=result.parse.invalid_rows,
                    skipped=stats.skipped,
                    elapsed_seconds=(datetime.now(UTC) - file_start).total_seconds(),
                    output_path=str(out_path),
                )
            )
            logger.info(
                f"{file_path.name}: wrote {out_path} apps={result.output.total_apps} "
                f"buckets={len(result.output.apps_by_path)}"
            )
            progress.finish_file(
                success=True, records=stats.processed, invalid_rows=result.parse.invalid_rows
            )

    # エラーログは実行単位で一括 flush
    try:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")
    except OSError as e:
        logger.error(f"error log flush failed: {e}")

    end_time = datetime.now(UTC)
    return RunResult(
        success_files=success,
        failed_files=failed,
        total_records=total_records,
        invalid_rows=total_invalid,
        skipped_records=total_skipped,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        outputs=outputs,
    )
