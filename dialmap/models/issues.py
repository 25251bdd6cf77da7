from __future__ import annotations

"""Pipeline issue taxonomy.

Errors (row dropped / record skipped) are raised inside a single row step and
caught at the parse_csv / transform_data boundary. Warnings are collected as
instances and never raised. Both end up as ErrorRecord lines in the error log.
"""

__all__ = [
    "PipelineIssue",
    "RowShapeError",
    "MissingRequiredFieldError",
    "MappingGapWarning",
    "HierarchyMismatchWarning",
    "UnrepairableError",
]


class PipelineIssue(Exception):
    """Base class for every row/record level problem.

    Attributes:
        row: 1-based CSV line number, -1 when unknown
        error_type: classification in UPPER_SNAKE_CASE
    """
    error_type = "PIPELINE_ISSUE"
    fatal = True  # True: 行/レコードを除外する

    def __init__(self, message: str, *, row: int = -1) -> None:
        super().__init__(message)
        self.row = row
        self.message = message


class RowShapeError(PipelineIssue):
    """Token count of a data row differs from the header count."""
    error_type = "ROW_SHAPE"


class MissingRequiredFieldError(PipelineIssue):
    """name/field/phase/category still empty after backfill and inference."""
    error_type = "MISSING_REQUIRED_FIELD"


class MappingGapWarning(PipelineIssue):
    """Raw label has no entry in a canonical map; passed through unchanged."""
    error_type = "MAPPING_GAP"
    fatal = False


class HierarchyMismatchWarning(PipelineIssue):
    """field/phase/category triple absent from the taxonomy; repaired."""
    error_type = "HIERARCHY_MISMATCH"
    fatal = False


class UnrepairableError(PipelineIssue):
    """No taxonomy available to repair against; record skipped."""
    error_type = "UNREPAIRABLE"
