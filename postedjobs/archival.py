"""
Archival policy for the active working set.

Keeps the active set bounded: once it grows past the threshold, the oldest
identifiers are moved into the current month's archive partition. "Oldest"
means lexicographically smallest, matching the sorted on-disk order.
"""

from dataclasses import dataclass
from typing import Optional, Set

from .archive import ArchivePartitionStore, month_key
from .config import (
    BOOTSTRAP_ARCHIVE_COUNT,
    DEFAULT_ARCHIVE_THRESHOLD,
    MAX_ACTIVE_ENTRIES,
    STEADY_ARCHIVE_COUNT,
)
from .logger import StructuredLogger, get_logger
from .persistence import StoreError


@dataclass
class ArchivalResult:
    triggered: bool = False
    bootstrap: bool = False
    archived: int = 0
    trimmed: int = 0
    month: Optional[str] = None
    error: Optional[str] = None


class ArchivalPolicy:
    def __init__(
        self,
        archive: ArchivePartitionStore,
        threshold: int = DEFAULT_ARCHIVE_THRESHOLD,
        max_entries: int = MAX_ACTIVE_ENTRIES,
        logger: Optional[StructuredLogger] = None,
    ):
        self.archive = archive
        self.threshold = threshold
        self.max_entries = max_entries
        self.logger = logger or get_logger()

    def should_archive(self, size: int) -> bool:
        return size > self.threshold

    def apply(self, active: Set[str]) -> ArchivalResult:
        """
        Archive and trim the active set in place.

        Archival failures are logged and leave the set as it was; the hard
        trim that follows always runs and never raises.
        """
        result = ArchivalResult()

        if self.should_archive(len(active)):
            result.triggered = True
            result.bootstrap = not self.archive.has_partitions()
            count = BOOTSTRAP_ARCHIVE_COUNT if result.bootstrap else STEADY_ARCHIVE_COUNT
            result.month = month_key(self.archive.clock())

            if result.bootstrap:
                self.logger.info(f"First-time archive: bootstrapping with {count} identifiers")
            else:
                self.logger.info(f"Capacity reached: archiving oldest {count} identifiers")

            try:
                result.archived = self.archive_oldest(active, count, result.month)
            except (OSError, StoreError) as e:
                result.error = str(e)
                self.logger.record("archive_failures")
                self.logger.error(
                    "Archiving failed, continuing without archiving (will retry next run)",
                    month=result.month,
                    active=len(active),
                    error=str(e),
                )

        result.trimmed = self.hard_trim(active)
        return result

    def archive_oldest(self, active: Set[str], count: int, month: str) -> int:
        to_archive = sorted(active)[:count]
        if not to_archive:
            return 0
        self.archive.merge_into(month, to_archive)
        active.difference_update(to_archive)
        self.logger.record("identifiers_archived", len(to_archive))
        self.logger.info(
            f"Archived {len(to_archive)} identifiers to {month}",
            active=len(active),
        )
        return len(to_archive)

    def hard_trim(self, active: Set[str]) -> int:
        excess = len(active) - self.max_entries
        if excess <= 0:
            return 0
        dropped = sorted(active)[:excess]
        active.difference_update(dropped)
        self.logger.record("emergency_trims")
        self.logger.warning(
            f"Emergency trim to {self.max_entries} identifiers",
            dropped=len(dropped),
            first_dropped=dropped[0],
            last_dropped=dropped[-1],
        )
        return len(dropped)
