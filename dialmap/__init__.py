"""CSV -> construction-software dial data pipeline.

Public entry points:
    parse_csv(text)                 -> ParseResult
    transform_data(records, config) -> AggregationResult
    run_pipeline(text, config)      -> PipelineResult
    load_config(path) / load_default_config()
"""

from .config.loader import ConfigError, load_config, load_default_config
from .services.pipeline import parse_csv, run_pipeline, transform_data

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "load_config",
    "load_default_config",
    "parse_csv",
    "run_pipeline",
    "transform_data",
]
