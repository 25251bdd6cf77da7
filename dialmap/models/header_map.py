from __future__ import annotations

from dataclasses import dataclass, field

"""HeaderReconciliation model: result of mapping CSV headers to canonical fields.

Built once per file from the header row and consumed by the row normalizer.
"""

__all__ = [
    "HeaderReconciliation",
]


@dataclass(frozen=True)
class HeaderReconciliation:
    """Header → canonical field mapping plus diagnostics.

    Every header appears in ``mapping`` exactly once. Unrecognized headers map to
    themselves and are also listed in ``unmapped``. Several headers may map to the
    same canonical field; the later column wins when a row is built.
    """
    mapping: dict[str, str]
    missing_required: list[str] = field(default_factory=list)  # 非致命 (推測で補完される可能性あり)
    unmapped: list[str] = field(default_factory=list)
    fuzzy_matches: dict[str, str] = field(default_factory=dict)  # header -> 類似判定で採用したエイリアス

    def fields_for(self, canonical: str) -> list[str]:
        """Headers that map to the given canonical field, in column order."""
        return [h for h, f in self.mapping.items() if f == canonical]
