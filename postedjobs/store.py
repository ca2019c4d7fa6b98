"""
Posted jobs store.

One PostedJobsStore is built per pipeline run and handed to whatever needs
dedup answers. It owns the active working set file and the archive
partitions under the same data directory. Single writer, single process:
exclusivity between runs is left to the scheduler.
"""

from datetime import datetime
from typing import Callable, Iterable, List, Optional, Set

from .archival import ArchivalPolicy, ArchivalResult
from .archive import ArchivePartitionStore, utc_now
from .config import MAX_ACTIVE_ENTRIES, StoreConfig
from .logger import StructuredLogger, get_logger
from .persistence import CorruptStoreError, StoreError, read_identifiers, write_identifiers_atomic
from .reopening import PostedDate, days_since_posted, decide_reopening, months_between


class PostedJobsStore:
    """
    Dedup store: bounded active set in front of monthly archives.

    Usage:
        store = PostedJobsStore.open(StoreConfig.from_env())
        if not store.has_been_posted(job_id, posted_date):
            publish(job)
            store.mark_as_posted(job_id)
    """

    def __init__(
        self,
        config: StoreConfig,
        logger: Optional[StructuredLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.logger = logger or get_logger()
        self.clock = clock
        self.archive = ArchivePartitionStore(config.archive_dir, logger=self.logger, clock=clock)
        self.archival = ArchivalPolicy(
            self.archive,
            threshold=config.archive_threshold,
            logger=self.logger,
        )
        self._ids: Set[str] = set()
        self.last_archival: Optional[ArchivalResult] = None

    @classmethod
    def open(cls, config: StoreConfig, **kwargs) -> "PostedJobsStore":
        store = cls(config, **kwargs)
        store.load()
        return store

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, job_id: str) -> bool:
        return self.contains(job_id)

    def identifiers(self) -> List[str]:
        return sorted(self._ids)

    # Active working set

    def load(self) -> "PostedJobsStore":
        """
        Read the active set from disk.

        Missing or malformed data starts an empty set with a warning; startup
        never fails here.
        """
        path = self.config.active_path
        if not path.exists():
            self.logger.warning("No existing posted jobs file, starting fresh", path=str(path))
            self._ids = set()
            return self

        try:
            ids = read_identifiers(path)
        except (CorruptStoreError, OSError, UnicodeDecodeError) as e:
            self.logger.warning(
                "Error loading posted jobs, starting with empty database",
                path=str(path),
                error=str(e),
            )
            self._ids = set()
            return self

        self._ids = set(ids)
        duplicates = len(ids) - len(self._ids)
        if duplicates:
            self.logger.warning("Duplicate entries collapsed on load", duplicates=duplicates)
        self.logger.info(f"Loaded {len(self._ids)} posted jobs", path=str(path))
        return self

    def contains(self, job_id: str) -> bool:
        return job_id in self._ids

    def insert(self, job_id: str) -> bool:
        """Add an identifier in memory. Returns False if it was already present."""
        if job_id in self._ids:
            return False
        self._ids.add(job_id)
        return True

    def remove(self, job_ids: Iterable[str]) -> List[str]:
        """Drop identifiers from the active set in memory; returns those removed."""
        removed = sorted(set(job_ids) & self._ids)
        self._ids.difference_update(removed)
        return removed

    def save(self) -> ArchivalResult:
        """
        Archive if needed, then persist the active set atomically.

        A failed or unverifiable write of the active file ends the process
        with status 1: continuing would risk republishing everything whose
        dedup history was lost.
        """
        path = self.config.active_path
        self.logger.debug("Saving posted jobs", path=str(path), size=len(self._ids))

        self.last_archival = self.archival.apply(self._ids)

        try:
            written = write_identifiers_atomic(path, self._ids)
        except (OSError, StoreError) as e:
            self.logger.critical(
                "CRITICAL ERROR SAVING POSTED JOBS",
                path=str(path),
                attempted=len(self._ids),
                error_type=type(e).__name__,
                error=str(e),
            )
            raise SystemExit(1) from e

        self.logger.record("saves")
        self.logger.info(f"Saved and verified {len(written)} posted jobs", path=str(path))
        return self.last_archival

    # Dedup decisions

    def has_been_posted(self, job_id: str, posted_date: PostedDate = None) -> bool:
        """
        Decide whether a candidate should be skipped.

        Args:
            job_id: Candidate identifier
            posted_date: Optional source-reported posting timestamp

        Returns:
            True if already posted (skip), False if new or a reopening
        """
        self.logger.record("checks")

        if job_id in self._ids:
            self.logger.record("active_hits")
            return True

        month = self.archive.find_across_recent_months(job_id, self.config.lookback_months)
        if month is None:
            return False

        self.logger.record("archive_hits")
        now = self.clock()
        months_old = months_between(month, now)
        days_old = days_since_posted(posted_date, now)
        decision = decide_reopening(months_old, days_old)

        if decision.allow:
            self.logger.record("reopenings_allowed")
            self.logger.info(
                f"Job reopening: {job_id}",
                archived_month=month,
                months_since_archived=months_old,
                days_since_posted=days_old,
                rule=decision.rule,
                reason=decision.reason,
            )
            return False

        self.logger.record("duplicates_blocked")
        self.logger.debug(
            f"Skipping archived duplicate: {job_id}",
            archived_month=month,
            rule=decision.rule,
            reason=decision.reason,
        )
        return True

    def has_been_posted_any(self, job_ids: Iterable[str], posted_date: PostedDate = None) -> bool:
        """True if any of the given identifiers (e.g. current and legacy formats) was posted."""
        return any(self.has_been_posted(job_id, posted_date) for job_id in job_ids)

    def mark_as_posted(self, job_id: str) -> ArchivalResult:
        self.insert(job_id)
        return self.save()

    # Diagnostics

    def stats(self) -> dict:
        size = len(self._ids)
        return {
            "active": size,
            "max_entries": MAX_ACTIVE_ENTRIES,
            "capacity_pct": round(size / MAX_ACTIVE_ENTRIES * 100, 1),
            "archive_threshold": self.config.archive_threshold,
            "lookback_months": self.config.lookback_months,
            "partitions": self.archive.sizes(),
            "active_path": str(self.config.active_path),
            "archive_dir": str(self.config.archive_dir),
        }
