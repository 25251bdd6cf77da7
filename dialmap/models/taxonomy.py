from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Taxonomy tree model for the construction-software dial.

The taxonomy is a read-only external resource (center → field → phase → category).
It is loaded once from config and shared between pipeline runs; nodes are frozen
so a run can never mutate it.

サブカテゴリ (第四階層) はこのツリーには含まれない。aggregator が
phase/category から論理的に導出する。
"""

__all__ = [
    "NodeType",
    "TaxonomyNode",
]


class NodeType(Enum):
    """Level of a taxonomy node.

    CENTER is the single root, the remaining levels appear in this order below it.
    """
    CENTER = "center"
    FIELD = "field"
    PHASE = "phase"
    CATEGORY = "category"


@dataclass(frozen=True)
class TaxonomyNode:
    """One node of the dial hierarchy.

    Children keep their declared order; "first child" is the tie-break used by
    hierarchy repair, so the order in the config file is meaningful.
    """
    name: str
    type: NodeType
    children: tuple[TaxonomyNode, ...] = field(default_factory=tuple)

    def find_child(self, name: str) -> TaxonomyNode | None:
        """Return the first direct child whose name matches exactly."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    @property
    def first_child(self) -> TaxonomyNode | None:
        return self.children[0] if self.children else None

    @staticmethod
    def from_dict(data: dict[str, Any]) -> TaxonomyNode:
        """Build a node tree from the nested ``{name, type, children}`` config form."""
        children = tuple(TaxonomyNode.from_dict(c) for c in data.get("children") or [])
        return TaxonomyNode(
            name=str(data["name"]),
            type=NodeType(data["type"]),
            children=children,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the renderer's ``{name, type, children}`` form.

        Category leaves carry no ``children`` key, matching the bundled resource.
        """
        data: dict[str, Any] = {"name": self.name, "type": self.type.value}
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data
