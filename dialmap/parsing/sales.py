from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation

"""Monetary string parsing for free-text sales values.

Input examples: "¥12,000", "5万", "1.2億", "99,000(永久ライセンス)", "約3兆円".
Output is a float amount in yen. Malformed input never raises; it yields 0.
"""

__all__ = [
    "UNIT_MULTIPLIERS",
    "parse_sales",
    "format_sales",
]

logger = logging.getLogger(__name__)

# 判定順 = 優先順。最初に見つかった単位のみ適用 (複合しない)
UNIT_MULTIPLIERS: tuple[tuple[str, int], ...] = (
    ("兆", 10**12),
    ("億", 10**8),
    ("万", 10**4),
)

_STRIP_CHARS = re.compile(r"[¥￥,，]")
_PARENTHETICAL = re.compile(r"[(（].*[)）]")
_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")


def parse_sales(text: str | None) -> float:
    """Convert a sales string into a non-negative amount in yen.

    Steps:
    1. Remove currency symbols and thousands separators
    2. Remove parenthetical annotations
    3. Take the first integer/decimal token (none -> 0)
    4. Apply the highest-precedence unit found: 兆 > 億 > 万
    """
    if not text:
        return 0.0
    try:
        cleaned = _STRIP_CHARS.sub("", str(text))
        cleaned = _PARENTHETICAL.sub("", cleaned)
        match = _NUMBER.search(cleaned)
        if not match:
            return 0.0
        # Decimal で乗算して 1.2億 のような値の丸め誤差を避ける
        value = Decimal(match.group(1))
        for unit, multiplier in UNIT_MULTIPLIERS:
            if unit in cleaned:
                value *= multiplier
                break
        return float(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        logger.warning(f"sales parse failed value={text!r}: {e}")
        return 0.0


def format_sales(amount: float) -> str:
    """Render an amount as the ranking label (億円 / 万円 / 円, 0 -> 不明)."""
    if amount == 0:
        return "不明"
    if amount >= 100_000_000:
        return f"{amount / 100_000_000:.1f}億円"
    if amount >= 10_000:
        return f"{amount / 10_000:.0f}万円"
    return f"{amount:.0f}円"
