"""
Monthly archive partitions.

Identifiers evicted from the active set land in
<archive_dir>/posted_jobs_<YYYY-MM>.json. Partitions are only consulted for
deduplication lookups and only ever grow.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from .config import DEFAULT_LOOKBACK_MONTHS, PARTITION_PREFIX
from .logger import StructuredLogger, get_logger
from .persistence import CorruptStoreError, read_identifiers, write_identifiers_atomic

MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_key(when: datetime) -> str:
    return f"{when.year:04d}-{when.month:02d}"


def parse_month_key(key: str) -> tuple:
    """Return (year, month) for a YYYY-MM key."""
    if not MONTH_KEY_RE.match(key):
        raise ValueError(f"Invalid month key: {key!r} (expected YYYY-MM)")
    year, month = key.split("-")
    return int(year), int(month)


def recent_months(now: datetime, count: int) -> List[str]:
    """Month keys for the current month and the count-1 before it, newest first."""
    months = []
    index = now.year * 12 + (now.month - 1)
    for offset in range(count):
        year, month0 = divmod(index - offset, 12)
        months.append(f"{year:04d}-{month0 + 1:02d}")
    return months


class ArchivePartitionStore:
    """
    Lazily loaded view over the monthly partition files.

    The cache lives for the life of the object and is cleared whenever a
    merge writes a partition.
    """

    def __init__(
        self,
        archive_dir: Path,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.archive_dir = Path(archive_dir)
        self.logger = logger or get_logger()
        self.clock = clock
        self._cache: Dict[str, FrozenSet[str]] = {}

    def partition_path(self, month: str) -> Path:
        parse_month_key(month)
        return self.archive_dir / f"{PARTITION_PREFIX}{month}.json"

    def list_months(self) -> List[str]:
        """Months that have a partition file on disk, oldest first."""
        if not self.archive_dir.is_dir():
            return []
        months = []
        for path in self.archive_dir.glob(f"{PARTITION_PREFIX}*.json"):
            key = path.stem[len(PARTITION_PREFIX):]
            if MONTH_KEY_RE.match(key):
                months.append(key)
        return sorted(months)

    def has_partitions(self) -> bool:
        return bool(self.list_months())

    def load_partition(self, month: str) -> FrozenSet[str]:
        """
        Load one partition through the cache.

        Missing files are empty partitions. Corrupted files are logged and
        treated as empty; this never raises for I/O or parse problems.
        """
        if month in self._cache:
            return self._cache[month]

        path = self.partition_path(month)
        ids: FrozenSet[str] = frozenset()
        if path.exists():
            try:
                ids = frozenset(read_identifiers(path))
                self.logger.debug(f"Loaded archive {month}", path=str(path), size=len(ids))
            except (CorruptStoreError, OSError, UnicodeDecodeError) as e:
                self.logger.warning(
                    f"Corrupted archive {month}, ignoring",
                    path=str(path),
                    error=str(e),
                )
        self._cache[month] = ids
        return ids

    def find_across_recent_months(
        self,
        job_id: str,
        months_back: int = DEFAULT_LOOKBACK_MONTHS,
    ) -> Optional[str]:
        """
        Search the most recent partitions for an identifier.

        Args:
            job_id: Identifier to look up
            months_back: How many calendar months to search, counting the current one

        Returns:
            The owning month key, or None if not archived in that window
        """
        for month in recent_months(self.clock(), months_back):
            if job_id in self.load_partition(month):
                return month
        return None

    def merge_into(self, month: str, ids: Iterable[str]) -> int:
        """
        Union identifiers into a month's partition and persist it atomically.

        Returns:
            Size of the merged partition

        Raises:
            OSError, StoreError: If the write or its verification fails
        """
        path = self.partition_path(month)
        existing: List[str] = []
        if path.exists():
            try:
                existing = read_identifiers(path)
            except (CorruptStoreError, UnicodeDecodeError) as e:
                self.logger.warning(
                    f"Corrupted existing archive {month}, rebuilding",
                    path=str(path),
                    error=str(e),
                )

        merged = write_identifiers_atomic(path, [*existing, *ids])
        self.invalidate()
        self.logger.info(
            f"Archive {month} verified",
            path=str(path),
            before=len(set(existing)),
            after=len(merged),
        )
        return len(merged)

    def invalidate(self):
        """Drop every cached partition."""
        self._cache.clear()

    def sizes(self) -> Dict[str, int]:
        return {month: len(self.load_partition(month)) for month in self.list_months()}
