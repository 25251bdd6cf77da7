from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from ..models.taxonomy import TaxonomyNode

"""Taxonomy validation and nearest-match repair.

Pure functions over the read-only taxonomy tree. Repair tie-break is the
declared child order: when nothing better matches, the first child wins.

第四階層 (サブカテゴリ) は設計フェーズの 意匠/構造/設備 のみ。
"""

__all__ = [
    "HierarchyPath",
    "SUBCATEGORY_PHASE",
    "SUBCATEGORY_CATEGORIES",
    "DEFAULT_SUBCATEGORY",
    "is_valid_hierarchy",
    "find_valid_combination",
    "needs_subcategory",
    "derive_subcategory",
]

SUBCATEGORY_PHASE = "設計"
SUBCATEGORY_CATEGORIES = frozenset({"意匠", "構造", "設備"})
DEFAULT_SUBCATEGORY = "設計"


@dataclass(frozen=True)
class HierarchyPath:
    field: str
    phase: str
    category: str

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.field, self.phase, self.category)


def is_valid_hierarchy(taxonomy: TaxonomyNode | None, field: str, phase: str, category: str) -> bool:
    """Exact-name walk field -> phase -> category.

    No taxonomy (None) means nothing to validate against, so every triple is
    valid. A root without fields rejects everything.
    """
    if taxonomy is None:
        return True
    field_node = taxonomy.find_child(field)
    if field_node is None or not field_node.children:
        return False
    phase_node = field_node.find_child(phase)
    if phase_node is None or not phase_node.children:
        return False
    return phase_node.find_child(category) is not None


def _closest_category(phase_node: TaxonomyNode, category: str) -> TaxonomyNode | None:
    exact = phase_node.find_child(category)
    if exact is not None:
        return exact
    if category:
        # 部分一致 (どちらかが他方を含む) を先頭ノードより優先
        for node in phase_node.children:
            if node.name in category or category in node.name:
                return node
    return phase_node.first_child


def find_valid_combination(
    taxonomy: TaxonomyNode | None, field: str, phase: str, category: str
) -> HierarchyPath | None:
    """Closest valid (field, phase, category) present in the taxonomy.

    - unknown field    -> first field that has phases
    - unknown phase    -> first phase (with categories) under that field
    - unknown category -> substring match, else first category

    Returns None only when there is no tree to draw from.
    """
    if taxonomy is None or not taxonomy.children:
        return None

    field_node = taxonomy.find_child(field)
    if field_node is None or not field_node.children:
        field_node = next((n for n in taxonomy.children if n.children), None)
        if field_node is None:
            return None

    phase_node = field_node.find_child(phase)
    if phase_node is None or not phase_node.children:
        phase_node = next((n for n in field_node.children if n.children), None)
        if phase_node is None:
            return None

    category_node = _closest_category(phase_node, category)
    if category_node is None:
        return None
    return HierarchyPath(field=field_node.name, phase=phase_node.name, category=category_node.name)


def needs_subcategory(phase: str, category: str) -> bool:
    return phase == SUBCATEGORY_PHASE and category in SUBCATEGORY_CATEGORIES


def derive_subcategory(raw: str, table: Mapping[str, str]) -> str:
    """Map a raw subcategory label; unknown or blank -> 設計."""
    value = (raw or "").strip()
    if value in table and table[value]:
        return table[value]
    return DEFAULT_SUBCATEGORY
