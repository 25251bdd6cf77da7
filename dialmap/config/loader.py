from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import MappingTables, PipelineConfig
from ..models.taxonomy import TaxonomyNode

"""Config loader.

Responsibilities:
- Load the YAML config (taxonomy tree + canonical mapping tables)
- Validate against config/schemas/config_schema.json
- Apply defaults (output_directory=./output, ranking_limit=10)
- Build the immutable PipelineConfig handed to every pipeline call
"""

__all__ = [
    "ConfigError",
    "SCHEMA_PATH",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_default_config",
    "config_from_dict",
]

_CONFIG_DIR = Path(__file__).parent
SCHEMA_PATH = _CONFIG_DIR / "schemas" / "config_schema.json"
DEFAULT_CONFIG_PATH = _CONFIG_DIR / "default.yml"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the data fails
            validation (missing keys, wrong types, unknown keys, bad node type)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> PipelineConfig:
    """Validate a parsed config mapping and build PipelineConfig."""
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    _validate_config_schema(data)

    raw_tree = data.get("taxonomy")
    taxonomy = TaxonomyNode.from_dict(raw_tree) if raw_tree is not None else None

    m = data["mappings"]
    mappings = MappingTables(
        field=m["field"],
        phase=m["phase"],
        category=m["category"],
        subcategory=m.get("subcategory", {}),
    )
    return PipelineConfig(
        taxonomy=taxonomy,
        mappings=mappings,
        source_directory=data.get("source_directory"),
        output_directory=data.get("output_directory", "./output"),
        ranking_limit=data.get("ranking_limit", 10),
    )


def load_config(path: Path) -> PipelineConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return config_from_dict(data)


def load_default_config() -> PipelineConfig:
    """Bundled taxonomy and mapping tables (config/default.yml)."""
    return load_config(DEFAULT_CONFIG_PATH)
