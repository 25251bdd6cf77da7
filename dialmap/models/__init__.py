"""Domain models for the construction-software dial pipeline.

This package contains the frozen dataclasses shared by the parsing and
service layers: taxonomy tree, config tables, normalized records, the
aggregated renderer output and run results.
"""

from .aggregated import AggregatedOutput, AppEntry
from .config_models import MappingTables, PipelineConfig
from .error_record import ErrorRecord
from .header_map import HeaderReconciliation
from .product_record import CanonicalField, ProductRecord
from .taxonomy import NodeType, TaxonomyNode

__all__ = [
    # Configuration models
    "MappingTables",
    "PipelineConfig",
    "NodeType",
    "TaxonomyNode",
    # Processing models
    "CanonicalField",
    "HeaderReconciliation",
    "ProductRecord",
    "ErrorRecord",
    # Output
    "AggregatedOutput",
    "AppEntry",
]
