from __future__ import annotations

from dialmap.models.issues import HierarchyMismatchWarning, MappingGapWarning, UnrepairableError
from dialmap.models.product_record import ProductRecord
from dialmap.models.taxonomy import NodeType, TaxonomyNode
from dialmap.services.aggregator import aggregate


def _rec(row: int, name: str, field: str, phase: str, category: str, sales: str = "", **kw) -> ProductRecord:
    return ProductRecord(
        row_number=row, name=name, field=field, phase=phase, category=category, sales_raw=sales, **kw
    )


def test_design_category_gets_subcategory_segment(small_taxonomy, small_mappings):
    result = aggregate([_rec(2, "BIMツール", "建築", "設計", "意匠", "¥5,000万")], small_taxonomy, small_mappings)
    apps = result.output.apps_by_path["建築/設計/意匠/設計"]
    assert [a.name for a in apps] == ["BIMツール"]
    assert apps[0].sales == 50000000
    assert result.stats.processed == 1
    assert result.issues == []


def test_explicit_subcategory_is_mapped(small_taxonomy, small_mappings):
    result = aggregate(
        [_rec(2, "構造ソフト", "建築", "設計", "構造", subcategory="積算")], small_taxonomy, small_mappings
    )
    assert list(result.output.apps_by_path) == ["建築/設計/構造/積算"]


def test_non_design_category_uses_three_segments(small_taxonomy, small_mappings):
    result = aggregate([_rec(2, "積算ソフト", "建築", "設計", "積算")], small_taxonomy, small_mappings)
    assert list(result.output.apps_by_path) == ["建築/設計/積算"]


def test_alias_labels_are_canonicalized(small_taxonomy, small_mappings):
    result = aggregate(
        [
            _rec(2, "住宅設計", "ハウスメーカー", "設計", "積算"),
            _rec(3, "見積くん", "建築", "施工・建設(プラント)", "見積"),
        ],
        small_taxonomy,
        small_mappings,
    )
    assert set(result.output.apps_by_path) == {"建築/設計/積算", "建築/施工/原価管理"}
    assert result.stats.repaired == 0


def test_unknown_label_is_gap_then_repaired(small_taxonomy, small_mappings):
    result = aggregate([_rec(4, "配管CAD", "プラント", "設計", "意匠")], small_taxonomy, small_mappings)
    assert list(result.output.apps_by_path) == ["建築/設計/意匠/設計"]
    kinds = [type(i) for i in result.issues]
    assert kinds == [MappingGapWarning, HierarchyMismatchWarning]
    assert all(i.row == 4 for i in result.issues)
    assert result.stats.mapping_gaps == 1
    assert result.stats.repaired == 1
    assert result.stats.skipped == 0


def test_buckets_sorted_by_sales_descending_and_stable(small_taxonomy, small_mappings):
    records = [
        _rec(2, "A", "建築", "施工", "工程管理", "1万"),
        _rec(3, "B", "建築", "施工", "工程管理", "3億"),
        _rec(4, "C", "建築", "施工", "工程管理", "1万"),
        _rec(5, "D", "建築", "施工", "工程管理", ""),
    ]
    result = aggregate(records, small_taxonomy, small_mappings)
    apps = result.output.apps_by_path["建築/施工/工程管理"]
    assert [a.name for a in apps] == ["B", "A", "C", "D"]
    sales = [a.sales for a in apps]
    assert sales == sorted(sales, reverse=True)


def test_unrepairable_record_is_skipped(small_mappings):
    root = TaxonomyNode(name="建設", type=NodeType.CENTER)
    result = aggregate([_rec(2, "X", "建築", "設計", "意匠")], root, small_mappings)
    assert result.output.apps_by_path == {}
    assert result.stats.skipped == 1
    assert result.stats.processed == 0
    assert isinstance(result.issues[-1], UnrepairableError)
    assert result.issues[-1].row == 2


def test_without_taxonomy_labels_pass_through(small_mappings):
    result = aggregate([_rec(2, "X", "土木", "維持管理", "保全")], None, small_mappings)
    assert list(result.output.apps_by_path) == ["土木/維持管理/保全"]
    assert result.output.structure is None


def test_entry_fields_and_name_cleanup(small_taxonomy, small_mappings):
    record = _rec(
        2, "工程くん (beta)", "建築", "施工", "工程管理", "¥12,000",
        description="工程表", company="C社", url="https://c.example.com",
    )
    app = aggregate([record], small_taxonomy, small_mappings).output.apps_by_path["建築/施工/工程管理"][0]
    assert app.to_dict() == {
        "name": "工程くん",
        "description": "工程表",
        "sales": 12000,
        "company": "C社",
        "url": "https://c.example.com",
    }


def test_structure_is_the_taxonomy(small_taxonomy, small_mappings):
    result = aggregate([], small_taxonomy, small_mappings)
    assert result.output.structure is small_taxonomy
    assert result.output.total_apps == 0
