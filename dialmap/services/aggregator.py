from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from ..models.aggregated import AggregatedOutput, AppEntry, build_path_key
from ..models.config_models import MappingTables, canonicalize
from ..models.issues import (
    HierarchyMismatchWarning,
    MappingGapWarning,
    PipelineIssue,
    UnrepairableError,
)
from ..models.processing_result import AggregationResult, AggregationStats
from ..models.product_record import ProductRecord
from ..models.taxonomy import TaxonomyNode
from ..parsing.normalizer import clean_name
from .hierarchy import (
    derive_subcategory,
    find_valid_combination,
    is_valid_hierarchy,
    needs_subcategory,
)

"""Aggregation of normalized records into sales-ranked, path-keyed buckets.

Per record:
1. canonical maps applied to field / phase / category (identity if absent)
2. taxonomy check, nearest-match repair when the triple is invalid
3. bucket key field/phase/category[/subcategory]
4. AppEntry appended

Finally every bucket is stable-sorted by sales descending. Processing never
aborts on a bad combination; only a record with nothing to repair against is
skipped.
"""

__all__ = [
    "aggregate",
    "sort_buckets",
]

logger = logging.getLogger(__name__)


def _apply_mapping(
    table: Mapping[str, str], kind: str, value: str, record: ProductRecord, issues: list[PipelineIssue]
) -> str:
    mapped, found = canonicalize(table, value)
    if not found:
        msg = f"{kind} '{value}' has no mapping entry"
        logger.warning(f"line {record.row_number}: {msg}")
        issues.append(MappingGapWarning(msg, row=record.row_number))
    return mapped


def sort_buckets(buckets: dict[str, list[AppEntry]]) -> None:
    """Sort every bucket in place by sales descending (stable)."""
    for apps in buckets.values():
        apps.sort(key=lambda a: a.sales, reverse=True)


def aggregate(
    records: Iterable[ProductRecord],
    taxonomy: TaxonomyNode | None,
    mappings: MappingTables,
) -> AggregationResult:
    """Group records by hierarchy path into ranked buckets.

    Args:
        records: normalized records from parse_csv
        taxonomy: read-only taxonomy root (None = no validation)
        mappings: canonical field / phase / category / subcategory tables

    Returns:
        AggregationResult with the renderer output, counters and issues
    """
    buckets: dict[str, list[AppEntry]] = {}
    issues: list[PipelineIssue] = []
    processed = 0
    skipped = 0
    repaired = 0

    for record in records:
        field = _apply_mapping(mappings.field, "field", record.field, record, issues)
        phase = _apply_mapping(mappings.phase, "phase", record.phase, record, issues)
        category = _apply_mapping(mappings.category, "category", record.category, record, issues)

        if not is_valid_hierarchy(taxonomy, field, phase, category):
            msg = (
                f"{field}/{phase}/{category} not in taxonomy "
                f"(original {record.field}/{record.phase}/{record.category})"
            )
            logger.warning(f"line {record.row_number}: {msg}")
            issues.append(HierarchyMismatchWarning(msg, row=record.row_number))

            combination = find_valid_combination(taxonomy, field, phase, category)
            if combination is None:
                msg = "no valid combination found, skipped"
                logger.warning(f"line {record.row_number}: {msg}")
                issues.append(UnrepairableError(msg, row=record.row_number))
                skipped += 1
                continue
            field, phase, category = combination.as_tuple()
            repaired += 1
            logger.info(f"line {record.row_number}: repaired -> {field}/{phase}/{category}")

        if needs_subcategory(phase, category):
            subcategory = derive_subcategory(record.subcategory, mappings.subcategory)
            key = build_path_key(field, phase, category, subcategory)
        else:
            key = build_path_key(field, phase, category)

        buckets.setdefault(key, []).append(
            AppEntry(
                name=clean_name(record.name),
                description=record.description or "",
                sales=record.sales_amount,
                company=record.company or "",
                url=record.url or "",
            )
        )
        processed += 1

    sort_buckets(buckets)

    mapping_gaps = sum(1 for i in issues if isinstance(i, MappingGapWarning))
    logger.info(
        f"aggregate done processed={processed} skipped={skipped} "
        f"mapping_gaps={mapping_gaps} repaired={repaired}"
    )
    return AggregationResult(
        output=AggregatedOutput(structure=taxonomy, apps_by_path=buckets),
        stats=AggregationStats(
            processed=processed,
            skipped=skipped,
            mapping_gaps=mapping_gaps,
            repaired=repaired,
        ),
        issues=issues,
    )
