"""Batch helpers for callers holding fetched job records."""

from typing import Any, Callable, Dict, List, Optional

from .identity import job_id_for, legacy_job_id_for
from .store import PostedJobsStore

Job = Dict[str, Any]
KeyFn = Callable[[Job], str]

POSTED_DATE_KEYS = ("date_posted", "job_posted_at_datetime_utc")


def posted_date_of(job: Job) -> Optional[str]:
    for key in POSTED_DATE_KEYS:
        value = job.get(key)
        if value:
            return value
    return None


def dedupe_batch(jobs: List[Job], key_fn: Optional[KeyFn] = None) -> List[Job]:
    """Drop repeats within one batch, keeping the first occurrence."""
    key_fn = key_fn or job_id_for
    seen = set()
    result = []
    for job in jobs:
        key = key_fn(job)
        if key not in seen:
            seen.add(key)
            result.append(job)
    return result


def filter_unposted(
    jobs: List[Job],
    store: PostedJobsStore,
    key_fn: Optional[KeyFn] = None,
    check_legacy: bool = True,
) -> List[Job]:
    """
    Keep the jobs the store has not published yet (reopenings included).

    Args:
        jobs: Fetched job records
        store: Loaded store
        key_fn: Identifier function (default: job_id_for)
        check_legacy: Also consult the legacy slug identifier

    Returns:
        Jobs to publish, in input order, without in-batch repeats
    """
    key_fn = key_fn or job_id_for
    logger = store.logger
    unposted = []
    for job in dedupe_batch(jobs, key_fn):
        ids = [key_fn(job)]
        if check_legacy:
            legacy = legacy_job_id_for(job)
            if legacy and legacy not in ids:
                ids.append(legacy)
        if store.has_been_posted_any(ids, posted_date_of(job)):
            logger.debug("Skipping already posted", job_id=ids[0])
            continue
        unposted.append(job)
    logger.info(f"{len(unposted)} of {len(jobs)} jobs not yet posted")
    return unposted
