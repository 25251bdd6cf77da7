from __future__ import annotations

from dialmap.models.issues import RowShapeError
from dialmap.parsing.tokenizer import parse_document, parse_line


def test_parse_line_plain_fields_are_trimmed():
    assert parse_line(" a , b,c ") == ["a", "b", "c"]


def test_parse_line_quoted_comma_kept_and_quotes_removed():
    assert parse_line('x,"¥5,000万",y') == ["x", "¥5,000万", "y"]


def test_parse_line_lone_quote_toggles_state():
    # エスケープ非対応: "" は2回のトグル
    assert parse_line('a""b,c') == ["ab", "c"]
    assert parse_line('"a,b') == ["a,b"]


def test_parse_line_empty_fields():
    assert parse_line(",,") == ["", "", ""]
    assert parse_line("") == [""]


def test_parse_document_skips_blank_lines_and_handles_crlf():
    text = "h1,h2\r\n1,2\r\n\r\n   \n3,4\n"
    doc = parse_document(text)
    assert doc.headers == ["h1", "h2"]
    assert [r.cells for r in doc.rows] == [["1", "2"], ["3", "4"]]
    assert [r.line_number for r in doc.rows] == [2, 5]
    assert doc.issues == []


def test_parse_document_discards_mismatched_rows():
    text = "a,b,c\n1,2,3\n1,2\n1,2,3,4\n"
    doc = parse_document(text)
    assert len(doc.rows) == 1
    assert len(doc.issues) == 2
    assert all(isinstance(i, RowShapeError) for i in doc.issues)
    assert [i.row for i in doc.issues] == [3, 4]
    # 残った行は必ずヘッダ数と一致
    assert all(len(r.cells) == len(doc.headers) for r in doc.rows)


def test_parse_document_strips_bom():
    doc = parse_document("\ufeff製品名,分野\nA,建築\n")
    assert doc.headers == ["製品名", "分野"]


def test_parse_document_empty_text():
    doc = parse_document("")
    assert doc.headers == []
    assert doc.rows == []
