from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field as dc_field
from types import MappingProxyType

from .taxonomy import TaxonomyNode

"""Config dataclasses for the dial pipeline.

These are the immutable inputs handed to every pipeline call. The loader in
dialmap/config/loader.py builds them from YAML; tests build them directly with
fixture tables.
"""

__all__ = [
    "MappingTables",
    "PipelineConfig",
    "canonicalize",
]


def _freeze(table: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(table or {}))


def canonicalize(table: Mapping[str, str], value: str) -> tuple[str, bool]:
    """Apply a canonical map to a raw label.

    Returns ``(label, found)``. Absent labels pass through unchanged (identity);
    the empty-string key is the fallback label for blank input.
    """
    if value in table:
        return table[value], True
    return value, False


@dataclass(frozen=True)
class MappingTables:
    """Raw label → canonical label tables for field/phase/category/subcategory.

    The tables are wrapped in MappingProxyType so concurrent runs can share them.
    """
    field: Mapping[str, str] = dc_field(default_factory=dict)
    phase: Mapping[str, str] = dc_field(default_factory=dict)
    category: Mapping[str, str] = dc_field(default_factory=dict)
    subcategory: Mapping[str, str] = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        # frozen なので object.__setattr__ で読み取り専用ビューに差し替える
        for name in ("field", "phase", "category", "subcategory"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))


@dataclass(frozen=True)
class PipelineConfig:
    """Root configuration object for one or more pipeline runs."""
    taxonomy: TaxonomyNode | None  # None = 階層検証不可 (全組み合わせ有効扱い)
    mappings: MappingTables
    source_directory: str | None = None  # CLI でパス未指定時の走査対象
    output_directory: str = "./output"  # JSON 出力先
    ranking_limit: int = 10  # ランキング表示件数
