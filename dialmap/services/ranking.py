from __future__ import annotations

import pandas as pd

from ..models.aggregated import PATH_SEPARATOR, AggregatedOutput, AppEntry
from ..parsing.sales import format_sales

"""Ranking lookup over the aggregated buckets.

The dial shows a sales ranking for any selected segment: a field, a
field/phase, or a full category path. This is a read-time derivation over
``apps_by_path``: the exact bucket plus every bucket below the given prefix.
"""

__all__ = [
    "RANKING_COLUMNS",
    "apps_for_path",
    "top_apps",
    "ranking_frame",
]

RANKING_COLUMNS = ["rank", "name", "company", "sales", "sales_label", "url"]


def _normalize_path(path: str | list[str] | tuple[str, ...]) -> str:
    if isinstance(path, str):
        parts = path.split(PATH_SEPARATOR)
    else:
        parts = list(path)
    return PATH_SEPARATOR.join(p.strip() for p in parts if p and p.strip())


def apps_for_path(output: AggregatedOutput, path: str | list[str] | tuple[str, ...]) -> list[AppEntry]:
    """All apps under ``path`` (field / field+phase / full key), sales descending.

    An empty path selects every bucket (center of the dial).
    """
    prefix = _normalize_path(path)
    selected: list[AppEntry] = []
    for key, apps in output.apps_by_path.items():
        if not prefix or key == prefix or key.startswith(prefix + PATH_SEPARATOR):
            selected.extend(apps)
    # 複数バケット結合後に再ソート (安定ソート: バケット順・挿入順を維持)
    selected.sort(key=lambda a: a.sales, reverse=True)
    return selected


def top_apps(
    output: AggregatedOutput, path: str | list[str] | tuple[str, ...], limit: int = 10
) -> list[AppEntry]:
    return apps_for_path(output, path)[: max(limit, 0)]


def ranking_frame(
    output: AggregatedOutput, path: str | list[str] | tuple[str, ...], limit: int | None = 10
) -> pd.DataFrame:
    """Ranking as a DataFrame (rank is 1-based) for display or CSV export."""
    apps = apps_for_path(output, path)
    if limit is not None:
        apps = apps[: max(limit, 0)]
    rows = [
        {
            "rank": i,
            "name": a.name,
            "company": a.company,
            "sales": a.sales,
            "sales_label": format_sales(a.sales),
            "url": a.url,
        }
        for i, a in enumerate(apps, start=1)
    ]
    return pd.DataFrame(rows, columns=RANKING_COLUMNS)
