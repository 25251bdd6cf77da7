from __future__ import annotations

import logging
import re

from ..models.header_map import HeaderReconciliation
from ..models.issues import MissingRequiredFieldError
from ..models.product_record import SECONDARY_FIELDS, CanonicalField, ProductRecord
from .inference import infer_category, infer_field, infer_phase
from .tokenizer import TokenizedRow

"""Row normalization: tokenized row + header map -> ProductRecord.

Steps (順序固定):
1. canonical dict from the header map (後勝ち)
2. name cleanup: parentheticals / URLs removed, overlong names truncated
3. ② column backfill for field / phase / category / subcategory
4. keyword inference for whatever is still missing
5. validity gate (MissingRequiredFieldError)
"""

__all__ = [
    "NAME_MAX_LENGTH",
    "TRUNCATION_SUFFIX",
    "clean_name",
    "truncate_name",
    "build_row_values",
    "normalize_row",
]

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50
TRUNCATION_SUFFIX = "..."

_PARENTHETICAL = re.compile(r"\s*[(（][^)）]*[)）]\s*")
_URL = re.compile(r"https?://\S+")
_WHITESPACE = re.compile(r"\s+")
_TRAILING_PARTIAL_WORD = re.compile(r"\s+\S*$")

_CANONICAL_VALUES = {f.value for f in CanonicalField}


def clean_name(name: str) -> str:
    """Strip parenthetical groups and bare URLs from a product name.

    Parentheticals go first so "製品 (https://x.com)" loses the whole group,
    not just the URL. Idempotent.
    """
    if not name:
        return ""
    cleaned = _PARENTHETICAL.sub(" ", name)
    cleaned = _URL.sub(" ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def truncate_name(name: str, limit: int = NAME_MAX_LENGTH) -> tuple[str, bool]:
    """Cut an overlong name at the last whitespace boundary within ``limit``.

    Returns ``(name, truncated)``. Names without whitespace are cut hard.
    """
    if len(name) <= limit:
        return name, False
    head = _TRAILING_PARTIAL_WORD.sub("", name[:limit]) or name[:limit]
    return head + TRUNCATION_SUFFIX, True


def build_row_values(headers: list[str], cells: list[str], reconciliation: HeaderReconciliation) -> dict[str, str]:
    """Canonical field -> cell value. Later columns overwrite earlier ones."""
    values: dict[str, str] = {}
    for header, cell in zip(headers, cells, strict=False):
        key = reconciliation.mapping.get(header, header)
        values[key] = cell or ""
    return values


def normalize_row(
    row: TokenizedRow,
    headers: list[str],
    reconciliation: HeaderReconciliation,
) -> ProductRecord:
    """Build a ProductRecord from one tokenized row.

    Raises:
        MissingRequiredFieldError: name empty, or field/phase/category still
            empty after backfill and inference
    """
    values = build_row_values(headers, row.cells, reconciliation)
    line = row.line_number

    # 製品名の処理
    raw_name = values.get(CanonicalField.NAME.value, "")
    name = clean_name(raw_name)
    if name != raw_name.strip():
        logger.debug(f"line {line}: name cleaned '{raw_name}' -> '{name}'")
    description = values.get(CanonicalField.DESCRIPTION.value, "")
    full_name = name
    name, truncated = truncate_name(name)
    if truncated:
        logger.warning(f"line {line}: name longer than {NAME_MAX_LENGTH} chars, truncated")
        if not description:
            # 長い製品名は概要の可能性が高いので元の値を概要へ退避
            description = full_name

    # ①列が空なら②列で補完
    for primary, secondary in SECONDARY_FIELDS.items():
        if not values.get(primary.value):
            values[primary.value] = values.get(secondary.value, "")

    if not name:
        raise MissingRequiredFieldError("product name is empty", row=line)

    field = values.get(CanonicalField.FIELD.value, "")
    phase = values.get(CanonicalField.PHASE.value, "")
    category = values.get(CanonicalField.CATEGORY.value, "")
    if not field or not phase or not category:
        logger.warning(f"line {line}: field/phase/category incomplete, inferring from name/description")
        field = field or infer_field(name, description)
        phase = phase or infer_phase(name, description)
        category = category or infer_category(name, description)

    missing = [
        label for label, value in (("field", field), ("phase", phase), ("category", category)) if not value
    ]
    if missing:
        raise MissingRequiredFieldError(f"missing after inference: {', '.join(missing)}", row=line)

    extras = {k: v for k, v in values.items() if k not in _CANONICAL_VALUES}
    return ProductRecord(
        row_number=line,
        name=name,
        field=field,
        phase=phase,
        category=category,
        subcategory=values.get(CanonicalField.SUBCATEGORY.value, ""),
        description=description,
        company=values.get(CanonicalField.COMPANY.value, ""),
        url=values.get(CanonicalField.URL.value, ""),
        sales_raw=values.get(CanonicalField.SALES.value, ""),
        extras=extras,
    )
