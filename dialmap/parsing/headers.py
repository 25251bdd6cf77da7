from __future__ import annotations

import logging

from ..models.header_map import HeaderReconciliation
from ..models.product_record import REQUIRED_FIELDS, CanonicalField

"""Header reconciliation: arbitrary CSV headers -> canonical field names.

Resolution order per header:
1. exact lookup in HEADER_ALIASES
2. keyword containment (case-insensitive), first rule wins, product-name
   keywords first; for the taxonomy columns a secondary marker
   (2 / ② / second / 副) selects the ② variant
3. identity mapping, recorded as unmapped

A missing required field is reported but not fatal: the row normalizer may
still infer it from name/description.
"""

__all__ = [
    "HEADER_ALIASES",
    "HEADER_KEYWORD_RULES",
    "SECONDARY_MARKERS",
    "find_similar_field",
    "reconcile_headers",
]

logger = logging.getLogger(__name__)

F = CanonicalField

HEADER_ALIASES: dict[str, CanonicalField] = {
    # 製品情報
    "製品名": F.NAME,
    "ソフト名": F.NAME,
    "アプリ名": F.NAME,
    "名称": F.NAME,
    "ソフトウェア名": F.NAME,
    "アプリケーション名": F.NAME,
    "product name": F.NAME,
    "name": F.NAME,
    # 製品概要
    "ソフト概要": F.DESCRIPTION,
    "製品概要": F.DESCRIPTION,
    "概要": F.DESCRIPTION,
    "説明": F.DESCRIPTION,
    "description": F.DESCRIPTION,
    "summary": F.DESCRIPTION,
    # 開発企業
    "開発企業": F.COMPANY,
    "企業名": F.COMPANY,
    "会社名": F.COMPANY,
    "開発会社": F.COMPANY,
    "ベンダー": F.COMPANY,
    "メーカー": F.COMPANY,
    "developer": F.COMPANY,
    "company": F.COMPANY,
    # 製品URL
    "製品URL": F.URL,
    "URL": F.URL,
    "url": F.URL,
    "ウェブサイト": F.URL,
    "サイト": F.URL,
    "website": F.URL,
    "product url": F.URL,
    # 売上情報
    "売上": F.SALES,
    "売上高": F.SALES,
    "年間売上": F.SALES,
    "売上額": F.SALES,
    "revenue": F.SALES,
    "sales": F.SALES,
    # 分野
    "分野": F.FIELD,
    "①分野": F.FIELD,
    "②分野": F.FIELD2,
    "field": F.FIELD,
    # フェーズ
    "フェーズ": F.PHASE,
    "①フェーズ": F.PHASE,
    "②フェーズ": F.PHASE2,
    "phase": F.PHASE,
    # カテゴリ
    "カテゴリ": F.CATEGORY,
    "①細目・管理項目": F.CATEGORY,
    "②細目・管理項目": F.CATEGORY2,
    "category": F.CATEGORY,
    # サブカテゴリ
    "サブカテゴリ": F.SUBCATEGORY,
    "subcategory": F.SUBCATEGORY,
}

SECONDARY_MARKERS: tuple[str, ...] = ("2", "②", "second", "副")

# (keywords, primary, secondary or None) - 上から順に評価、製品名が最優先
# サブカテゴリ系の見出しは "カテゴリ" を含むため細目に入る (完全一致表の "サブカテゴリ" は別扱い)
HEADER_KEYWORD_RULES: tuple[tuple[tuple[str, ...], CanonicalField, CanonicalField | None], ...] = (
    (("製品", "ソフト", "アプリ", "名称", "name", "product"), F.NAME, None),
    (("企業", "会社", "ベンダー", "メーカー", "company", "developer"), F.COMPANY, None),
    (("売上", "年商", "revenue", "sales"), F.SALES, None),
    (("分野", "field"), F.FIELD, F.FIELD2),
    (("フェーズ", "phase", "stage"), F.PHASE, F.PHASE2),
    (("細目", "管理項目", "カテゴリ", "category"), F.CATEGORY, F.CATEGORY2),
    # 以下は上記のどれにも該当しない見出しのみ
    (("url", "サイト", "website", "link"), F.URL, None),
    (("概要", "説明", "description", "summary"), F.DESCRIPTION, None),
)


def _is_secondary(lower_header: str) -> bool:
    return any(marker in lower_header for marker in SECONDARY_MARKERS)


def find_similar_field(header: str) -> CanonicalField | None:
    """Keyword-containment fallback for headers missing from HEADER_ALIASES."""
    lower = header.lower()
    for keywords, primary, secondary in HEADER_KEYWORD_RULES:
        if any(k in lower for k in keywords):
            if secondary is not None and _is_secondary(lower):
                return secondary
            return primary
    return None


def reconcile_headers(headers: list[str]) -> HeaderReconciliation:
    """Map each header to a canonical field and report gaps."""
    mapping: dict[str, str] = {}
    unmapped: list[str] = []
    fuzzy: dict[str, str] = {}
    mapped_fields: set[str] = set()

    for header in headers:
        exact = HEADER_ALIASES.get(header)
        if exact is not None:
            mapping[header] = exact.value
            mapped_fields.add(exact.value)
            continue
        similar = find_similar_field(header)
        if similar is not None:
            mapping[header] = similar.value
            fuzzy[header] = similar.value
            mapped_fields.add(similar.value)
            logger.info(f"header '{header}' -> {similar.value} (keyword match)")
        else:
            # マッピングなし: そのまま使用
            mapping[header] = header
            unmapped.append(header)
            logger.warning(f"header '{header}' has no mapping")

    missing = [f.value for f in REQUIRED_FIELDS if f.value not in mapped_fields]
    for name in missing:
        logger.warning(f"required field '{name}' has no header")

    reconciliation = HeaderReconciliation(
        mapping=mapping,
        missing_required=missing,
        unmapped=unmapped,
        fuzzy_matches=fuzzy,
    )
    for canonical in sorted(mapped_fields):
        columns = reconciliation.fields_for(canonical)
        if len(columns) > 1:
            # 同じ項目に複数列: 行組み立て時は右側の列が優先
            logger.warning(f"headers {columns} all map to '{canonical}', last column wins")
    return reconciliation
