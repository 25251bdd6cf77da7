from __future__ import annotations

from ..models.processing_result import RunResult

"""SUMMARY line rendering for a dial pipeline run."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY files={total} success={s} failed={f} records={n} invalid_rows={i}
    skipped={k} elapsed_sec={sec}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = RunResult(
        ...     success_files=1, failed_files=0, total_records=12, invalid_rows=2,
        ...     skipped_records=0, start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(r)
        'SUMMARY files=1 success=1 failed=0 records=12 invalid_rows=2 skipped=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"records={result.total_records} "
        f"invalid_rows={result.invalid_rows} "
        f"skipped={result.skipped_records} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
