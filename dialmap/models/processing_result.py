from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .aggregated import AggregatedOutput
from .header_map import HeaderReconciliation
from .issues import PipelineIssue
from .product_record import ProductRecord

"""Processing result models for the dial pipeline.

ParseResult / AggregationResult carry the row counts that the pipeline reports
instead of raising. FileStat / RunResult aggregate a multi-file CLI run for the
SUMMARY line.
"""

__all__ = [
    "ParseResult",
    "AggregationStats",
    "AggregationResult",
    "PipelineResult",
    "FileStat",
    "RunResult",
]


@dataclass(frozen=True)
class ParseResult:
    """Output of parse_csv: retained records and row counters."""
    records: list[ProductRecord]
    reconciliation: HeaderReconciliation | None  # None = ヘッダ行なし (空テキスト)
    valid_rows: int = 0
    invalid_rows: int = 0  # 形状不一致 + 必須欠落
    issues: list[PipelineIssue] = field(default_factory=list)


@dataclass(frozen=True)
class AggregationStats:
    """Counters reported by the aggregator."""
    processed: int = 0  # バケットに配置したレコード数
    skipped: int = 0  # 修復不能でスキップ
    mapping_gaps: int = 0  # 正規化マップ未登録ラベル数
    repaired: int = 0  # 階層修復で置換したレコード数


@dataclass(frozen=True)
class AggregationResult:
    output: AggregatedOutput
    stats: AggregationStats
    issues: list[PipelineIssue] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineResult:
    """One CSV text through parse + transform."""
    output: AggregatedOutput
    parse: ParseResult
    aggregation: AggregationResult

    @property
    def issues(self) -> list[PipelineIssue]:
        return [*self.parse.issues, *self.aggregation.issues]


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics for a multi-file run."""
    file_name: str
    status: str  # success/failed
    records: int  # バケット配置済みレコード数
    invalid_rows: int
    skipped: int
    elapsed_seconds: float
    output_path: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results for a CLI run (SUMMARY line source)."""
    success_files: int
    failed_files: int
    total_records: int
    invalid_rows: int
    skipped_records: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
    outputs: dict[str, AggregatedOutput] | None = None  # file name -> output

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
