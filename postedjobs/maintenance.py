"""
Maintenance operations on a loaded store.

Removing identifiers lets specific jobs be published again (e.g. after a
routing fix). Removal is a dry run unless execute=True, and a backup of the
active set is written first.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Pattern, Union

from .config import MAX_ACTIVE_ENTRIES
from .persistence import write_identifiers_atomic
from .store import PostedJobsStore


@dataclass
class RemovalReport:
    matched: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    backup_path: Optional[Path] = None
    executed: bool = False


def _compile(pattern: Union[str, Pattern]) -> Pattern:
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern


def find_matching(store: PostedJobsStore, pattern: Union[str, Pattern]) -> List[str]:
    """Active identifiers matching a regex (searched, not anchored)."""
    regex = _compile(pattern)
    return [job_id for job_id in store.identifiers() if regex.search(job_id)]


def remove_matching(
    store: PostedJobsStore,
    pattern: Union[str, Pattern],
    execute: bool = False,
    backup: bool = True,
) -> RemovalReport:
    """
    Remove matching identifiers from the active set.

    Args:
        store: Loaded store
        pattern: Regex (case-insensitive when given as a string)
        execute: Actually remove and save; otherwise only report matches
        backup: Write the pre-removal active set to the backup file first

    Returns:
        RemovalReport describing what matched and what was removed
    """
    report = RemovalReport(matched=find_matching(store, pattern))
    logger = store.logger

    if not report.matched:
        logger.info("No identifiers match removal pattern", pattern=str(pattern))
        return report

    if not execute:
        logger.info(
            "Dry run: identifiers would be removed",
            matched=len(report.matched),
            remaining=len(store) - len(report.matched),
        )
        return report

    if backup:
        report.backup_path = store.config.backup_path
        write_identifiers_atomic(report.backup_path, store.identifiers())
        logger.info("Backed up active set", path=str(report.backup_path), size=len(store))

    report.removed = store.remove(report.matched)
    store.save()
    report.executed = True
    logger.info(f"Removed {len(report.removed)} identifiers", remaining=len(store))
    return report


def diagnose(store: PostedJobsStore) -> List[Dict[str, str]]:
    """Health findings for the store, most urgent first."""
    findings = []
    size = len(store)

    if size >= MAX_ACTIVE_ENTRIES:
        findings.append({
            "priority": "HIGH",
            "issue": f"Active set at capacity ({size}/{MAX_ACTIVE_ENTRIES})",
            "action": "Check archive directory permissions; archival should keep the set below the threshold",
        })
    elif size > store.config.archive_threshold:
        findings.append({
            "priority": "MEDIUM",
            "issue": f"Active set above archive threshold ({size} > {store.config.archive_threshold})",
            "action": "Next save will archive the oldest identifiers",
        })

    if size > 0 and not store.archive.has_partitions():
        findings.append({
            "priority": "LOW",
            "issue": "No archive partitions yet",
            "action": f"First archival will move the oldest identifiers once the set exceeds {store.config.archive_threshold}",
        })

    return findings
