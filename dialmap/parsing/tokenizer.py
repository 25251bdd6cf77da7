from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..models.issues import RowShapeError

"""CSV tokenizer for hand-authored exports.

Dialect (spreadsheet exports):
- comma separated, double quotes toggle "inside quotes" and are dropped
- no escaped quotes ("" is just two toggles)
- every field is trimmed
- first line is the header, blank lines are skipped

行の列数がヘッダ数と一致しない場合はその行のみ破棄 (RowShapeError を記録)。
"""

__all__ = [
    "TokenizedRow",
    "TokenizedDocument",
    "parse_line",
    "parse_document",
]

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")
_BOM = "\ufeff"


@dataclass(frozen=True)
class TokenizedRow:
    line_number: int  # 1-based (ヘッダ行 = 1)
    cells: list[str]


@dataclass
class TokenizedDocument:
    headers: list[str]
    rows: list[TokenizedRow] = field(default_factory=list)
    issues: list[RowShapeError] = field(default_factory=list)


def parse_line(line: str) -> list[str]:
    """Split one CSV line on commas outside double quotes."""
    result: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    result.append("".join(current).strip())
    return result


def parse_document(text: str) -> TokenizedDocument:
    """Tokenize a whole CSV text into header + shape-checked rows."""
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    lines = _LINE_SPLIT.split(text)
    if not lines or lines[0].strip() == "":
        return TokenizedDocument(headers=[])

    headers = parse_line(lines[0])
    doc = TokenizedDocument(headers=headers)
    for index, line in enumerate(lines[1:], start=2):
        if line.strip() == "":
            continue
        cells = parse_line(line)
        if len(cells) != len(headers):
            msg = f"header count ({len(headers)}) != value count ({len(cells)})"
            logger.warning(f"line {index}: {msg}")
            doc.issues.append(RowShapeError(msg, row=index))
            continue
        doc.rows.append(TokenizedRow(line_number=index, cells=cells))
    return doc
