from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config, load_default_config
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_level, setup_logging
from ..models.config_models import PipelineConfig
from ..services.pipeline import ProcessingError, process_files, scan_csv_files
from ..services.ranking import ranking_frame
from ..services.summary import render_summary_line

"""CLI entrypoint: python -m dialmap.cli

Flow:
- Load .env (DIALMAP_CONFIG で設定ファイルを指定可能)
- Load config (explicit --config > DIALMAP_CONFIG > config/dialmap.yml > bundled default)
- Collect CSV files (positional paths, or source_directory from config)
- Run the pipeline per file, write JSON outputs, print SUMMARY
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

LOCAL_CONFIG_PATH = Path("config/dialmap.yml")


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv. A missing file is not an error."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CSV -> construction software dial data")
    p.add_argument("paths", nargs="*", help="CSV files or directories (default: source_directory)")
    p.add_argument("--config", type=Path, default=None, help="Config YAML (taxonomy + mappings)")
    p.add_argument("--output-dir", type=Path, default=None, help="Directory for output JSON")
    p.add_argument("--ranking", default=None, help="Print ranking for a path prefix, e.g. 建築/設計")
    p.add_argument("--limit", type=int, default=None, help="Ranking size (default: ranking_limit)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(explicit: Path | None) -> PipelineConfig:
    if explicit is not None:
        return load_config(explicit)
    env_path = os.getenv("DIALMAP_CONFIG")
    if env_path:
        return load_config(Path(env_path))
    if LOCAL_CONFIG_PATH.exists():
        return load_config(LOCAL_CONFIG_PATH)
    return load_default_config()


def _collect_files(raw_paths: list[str], cfg: PipelineConfig) -> list[Path]:
    if not raw_paths:
        if not cfg.source_directory:
            raise ProcessingError("no input paths and no source_directory in config")
        return scan_csv_files(Path(cfg.source_directory))
    files: list[Path] = []
    for raw in raw_paths:
        p = Path(raw)
        if p.is_dir():
            files.extend(scan_csv_files(p))
        else:
            # 存在しないファイルは process_files 側で読み込み失敗として計上
            files.append(p)
    return files


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで [] を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_level(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        files = _collect_files(args.paths, cfg)
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    logger.info(f"Processing {len(files)} file(s)")
    result = process_files(
        files,
        cfg,
        output_directory=args.output_dir,
        error_log=ErrorLogBuffer(),
    )

    if args.ranking is not None and result.outputs:
        limit = args.limit if args.limit is not None else cfg.ranking_limit
        for name, output in result.outputs.items():
            frame = ranking_frame(output, args.ranking, limit=limit)
            print(f"RANKING {name} path={args.ranking}")
            if frame.empty:
                print("  (no apps)")
            else:
                print(frame.to_string(index=False))

    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
