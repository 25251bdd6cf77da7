from __future__ import annotations

from dataclasses import dataclass

"""Keyword inference for missing field / phase / category values.

Each table is an ordered list of rules evaluated against the lowercase
``name + " " + description`` text; the first rule with a matching keyword wins
and each table has a fixed default.
"""

__all__ = [
    "InferenceRule",
    "FIELD_RULES",
    "PHASE_RULES",
    "CATEGORY_RULES",
    "DEFAULT_FIELD",
    "DEFAULT_PHASE",
    "DEFAULT_CATEGORY",
    "infer",
    "infer_field",
    "infer_phase",
    "infer_category",
]


@dataclass(frozen=True)
class InferenceRule:
    keywords: tuple[str, ...]
    result: str

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


DEFAULT_FIELD = "建築"
DEFAULT_PHASE = "施工・建設(プラント)"
DEFAULT_CATEGORY = "施工総合管理"

FIELD_RULES: tuple[InferenceRule, ...] = (
    InferenceRule(("建築", "ハウス"), "建築"),
    InferenceRule(("土木", "橋梁", "道路"), "土木"),
    InferenceRule(("プラント", "工場"), "プラント"),
)

PHASE_RULES: tuple[InferenceRule, ...] = (
    InferenceRule(("設計", "cad", "bim"), "設計"),
    InferenceRule(("施工", "工事", "現場"), "施工・建設(プラント)"),
    InferenceRule(("維持", "管理", "保全"), "維持管理・運営保全O＆M(プラント)"),
)

CATEGORY_RULES: tuple[InferenceRule, ...] = (
    # 設計
    InferenceRule(("意匠", "デザイン"), "意匠"),
    InferenceRule(("構造", "耐震"), "構造"),
    InferenceRule(("設備", "空調", "電気"), "設備"),
    InferenceRule(("積算", "見積"), "積算"),
    # 施工
    InferenceRule(("工程", "スケジュール"), "工程管理"),
    InferenceRule(("原価", "コスト"), "原価管理"),
    InferenceRule(("品質", "検査"), "品質管理"),
    InferenceRule(("安全", "事故"), "安全管理"),
    # 維持管理
    InferenceRule(("保全", "点検"), "保全"),
    InferenceRule(("運用", "オペレーション"), "運用"),
    InferenceRule(("改修", "リノベーション"), "改修"),
)


def _context(name: str, description: str) -> str:
    return f"{name or ''} {description or ''}".lower()


def infer(rules: tuple[InferenceRule, ...], default: str, text: str) -> str:
    for rule in rules:
        if rule.matches(text):
            return rule.result
    return default


def infer_field(name: str, description: str = "") -> str:
    return infer(FIELD_RULES, DEFAULT_FIELD, _context(name, description))


def infer_phase(name: str, description: str = "") -> str:
    return infer(PHASE_RULES, DEFAULT_PHASE, _context(name, description))


def infer_category(name: str, description: str = "") -> str:
    return infer(CATEGORY_RULES, DEFAULT_CATEGORY, _context(name, description))
