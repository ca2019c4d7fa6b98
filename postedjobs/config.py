"""
Store configuration.

Only the archival trigger threshold is meant to be tuned per deployment
(ARCHIVE_THRESHOLD). The remaining numbers below are policy constants.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .env import load_env
from .logger import get_logger

# Active working set
MAX_ACTIVE_ENTRIES = 5000
DEFAULT_ARCHIVE_THRESHOLD = 4500

# Archival cut sizes
BOOTSTRAP_ARCHIVE_COUNT = 1500
STEADY_ARCHIVE_COUNT = 1000

# Reopening policy
REOPEN_MIN_MONTHS = 2
REOPEN_UNDATED_MIN_MONTHS = 3
REOPEN_FRESH_DAYS = 30

DEFAULT_LOOKBACK_MONTHS = 2

ACTIVE_FILENAME = "posted_jobs.json"
ARCHIVE_DIRNAME = "archive"
PARTITION_PREFIX = "posted_jobs_"


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        get_logger().warning(f"Ignoring invalid {name}", value=raw, default=default)
        return default
    if value <= 0:
        get_logger().warning(f"Ignoring non-positive {name}", value=value, default=default)
        return default
    return value


@dataclass
class StoreConfig:
    """Paths and tunables for one store instance."""

    data_dir: Path = field(default_factory=lambda: Path("data"))
    active_filename: str = ACTIVE_FILENAME
    archive_dirname: str = ARCHIVE_DIRNAME
    archive_threshold: int = DEFAULT_ARCHIVE_THRESHOLD
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def active_path(self) -> Path:
        return self.data_dir / self.active_filename

    @property
    def archive_dir(self) -> Path:
        return self.data_dir / self.archive_dirname

    @property
    def backup_path(self) -> Path:
        return self.data_dir / "posted_jobs_backup.json"

    @classmethod
    def from_env(cls, data_dir: Optional[Path] = None) -> "StoreConfig":
        """
        Build a config from the process environment (after reading .env).

        Args:
            data_dir: Explicit data directory; overrides POSTEDJOBS_DATA_DIR

        Returns:
            StoreConfig instance
        """
        load_env()
        if data_dir is None:
            data_dir = Path(os.getenv("POSTEDJOBS_DATA_DIR", "data"))
        return cls(
            data_dir=data_dir,
            archive_threshold=_int_from_env("ARCHIVE_THRESHOLD", DEFAULT_ARCHIVE_THRESHOLD),
            lookback_months=_int_from_env("POSTEDJOBS_LOOKBACK_MONTHS", DEFAULT_LOOKBACK_MONTHS),
        )
