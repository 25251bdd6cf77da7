from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dc_field
from enum import Enum

from ..parsing.sales import parse_sales

"""ProductRecord model: one normalized CSV row.

A ProductRecord lives only for the duration of one transform call; the
aggregator copies what the renderer needs into AppEntry and drops the record.
"""

__all__ = [
    "CanonicalField",
    "REQUIRED_FIELDS",
    "SECONDARY_FIELDS",
    "ProductRecord",
]


class CanonicalField(str, Enum):
    """Internal field names that CSV headers are reconciled to."""
    NAME = "name"
    DESCRIPTION = "description"
    COMPANY = "company"
    URL = "url"
    SALES = "sales"
    FIELD = "field"
    PHASE = "phase"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    # ②列 (補完専用)
    FIELD2 = "field2"
    PHASE2 = "phase2"
    CATEGORY2 = "category2"
    SUBCATEGORY2 = "subcategory2"


REQUIRED_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.NAME,
    CanonicalField.FIELD,
    CanonicalField.PHASE,
    CanonicalField.CATEGORY,
)

# primary -> secondary (①列が空のとき②列で補完)
SECONDARY_FIELDS: dict[CanonicalField, CanonicalField] = {
    CanonicalField.FIELD: CanonicalField.FIELD2,
    CanonicalField.PHASE: CanonicalField.PHASE2,
    CanonicalField.CATEGORY: CanonicalField.CATEGORY2,
    CanonicalField.SUBCATEGORY: CanonicalField.SUBCATEGORY2,
}


@dataclass(frozen=True)
class ProductRecord:
    """Logical representation of one product row after normalization.

    ``row_number`` is the 1-based line number in the CSV text (header = 1).
    ``extras`` keeps unmapped columns as-is so nothing in the source row is lost.
    """
    row_number: int
    name: str
    field: str
    phase: str
    category: str
    subcategory: str = ""
    description: str = ""
    company: str = ""
    url: str = ""
    sales_raw: str = ""
    extras: dict[str, str] = dc_field(default_factory=dict)

    @property
    def sales_amount(self) -> float:
        """Sales in base currency units (yen), 0 when missing or unparseable."""
        return parse_sales(self.sales_raw)
