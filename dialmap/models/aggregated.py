from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .taxonomy import TaxonomyNode

"""Aggregated output handed to the dial renderer.

AggregatedOutput is the only durable artifact of a run. It holds the taxonomy
root and the path-keyed ranking buckets, nothing that points back to the CSV.

Path key format: ``field/phase/category`` or ``field/phase/category/subcategory``
('/' 区切り、前方一致でフィルタ可能).
"""

__all__ = [
    "PATH_SEPARATOR",
    "AppEntry",
    "AggregatedOutput",
    "build_path_key",
]

PATH_SEPARATOR = "/"


def build_path_key(*segments: str) -> str:
    return PATH_SEPARATOR.join(segments)


@dataclass(frozen=True)
class AppEntry:
    """One ranked product inside a bucket."""
    name: str
    description: str
    sales: float
    company: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AggregatedOutput:
    """Renderer input: taxonomy structure + sales-ranked buckets by path."""
    structure: TaxonomyNode | None
    apps_by_path: dict[str, list[AppEntry]]

    @property
    def total_apps(self) -> int:
        return sum(len(apps) for apps in self.apps_by_path.values())

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form with the renderer's key names (``appsByPath``)."""
        return {
            "structure": self.structure.to_dict() if self.structure is not None else None,
            "appsByPath": {
                path: [a.to_dict() for a in apps] for path, apps in self.apps_by_path.items()
            },
        }
