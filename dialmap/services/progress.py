from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for a multi-file CSV run (tqdm, TTY only).

The bar advances once per CSV file and carries the run totals as postfix:
records placed in buckets, invalid rows dropped, failed files. In non-TTY
environments (CI, pipes) no bar is created and only the totals are kept.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One bar across the CSV files of a run, with running row totals."""

    def __init__(self, total_files: int, *, description: str = "Processing files") -> None:
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.records = 0
        self.invalid_rows = 0
        self.failed_files = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def start_file(self, file_path: Path) -> None:
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, success: bool = True, *, records: int = 0, invalid_rows: int = 0) -> None:
        """Add one file's counts to the totals and advance the bar."""
        if success:
            self.records += records
            self.invalid_rows += invalid_rows
        else:
            self.failed_files += 1
        if self.pbar is not None:
            self.pbar.set_postfix(records=self.records, invalid=self.invalid_rows, failed=self.failed_files)
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
