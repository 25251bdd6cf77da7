# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from dialmap.config.loader import load_default_config
from dialmap.logging.init import reset_logging
from dialmap.models.config_models import MappingTables, PipelineConfig
from dialmap.models.taxonomy import NodeType, TaxonomyNode


def _cat(name: str) -> TaxonomyNode:
    return TaxonomyNode(name=name, type=NodeType.CATEGORY)


def _phase(name: str, *cats: str) -> TaxonomyNode:
    return TaxonomyNode(name=name, type=NodeType.PHASE, children=tuple(_cat(c) for c in cats))


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def small_taxonomy() -> TaxonomyNode:
    """Two fields, enough to exercise validation and repair."""
    return TaxonomyNode(
        name="建設",
        type=NodeType.CENTER,
        children=(
            TaxonomyNode(
                name="建築",
                type=NodeType.FIELD,
                children=(
                    _phase("設計", "意匠", "構造", "設備", "積算"),
                    _phase("施工", "施工総合管理", "工程管理", "原価管理"),
                ),
            ),
            TaxonomyNode(
                name="土木",
                type=NodeType.FIELD,
                children=(
                    _phase("設計", "構造", "積算"),
                    _phase("維持管理", "保全", "運用"),
                ),
            ),
        ),
    )


@pytest.fixture()
def small_mappings() -> MappingTables:
    return MappingTables(
        field={"建築": "建築", "土木": "土木", "ハウスメーカー": "建築", "": "その他"},
        phase={"設計": "設計", "施工": "施工", "施工・建設(プラント)": "施工", "維持管理": "維持管理", "": "その他"},
        category={
            "意匠": "意匠",
            "構造": "構造",
            "設備": "設備",
            "積算": "積算",
            "施工総合管理": "施工総合管理",
            "工程管理": "工程管理",
            "見積": "原価管理",
            "保全": "保全",
            "": "その他",
        },
        subcategory={"設計": "設計", "積算": "積算", "": "設計"},
    )


@pytest.fixture()
def small_config(small_taxonomy: TaxonomyNode, small_mappings: MappingTables) -> PipelineConfig:
    return PipelineConfig(taxonomy=small_taxonomy, mappings=small_mappings)


@pytest.fixture()
def default_config() -> PipelineConfig:
    return load_default_config()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./output
ranking_limit: 5
taxonomy:
  name: 建設
  type: center
  children:
    - name: 建築
      type: field
      children:
        - name: 設計
          type: phase
          children:
            - {name: 意匠, type: category}
            - {name: 積算, type: category}
        - name: 施工
          type: phase
          children:
            - {name: 施工総合管理, type: category}
            - {name: 工程管理, type: category}
mappings:
  field:
    建築: 建築
    ハウスメーカー: 建築
    "": その他
  phase:
    設計: 設計
    施工: 施工
    "施工・建設(プラント)": 施工
    "": その他
  category:
    意匠: 意匠
    積算: 積算
    施工総合管理: 施工総合管理
    工程管理: 工程管理
    "": その他
  subcategory:
    設計: 設計
    積算: 積算
    "": 設計
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dialmap.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv_text() -> str:
    return (
        "製品名,開発企業,分野,フェーズ,カテゴリ,売上\n"
        "BIMツール (http://x.com),A社,建築,設計,意匠,\"¥5,000万\"\n"
        "積算ソフト,B社,建築,設計,積算,1.2億\n"
        "工程くん,C社,建築,施工,工程管理,\"¥12,000\"\n"
        "現場ナビ,D社,建築,施工,工程管理,3億\n"
    )


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(name: str, text: str) -> Path:
        path = temp_workdir / "data" / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
