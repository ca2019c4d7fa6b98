"""
Reopening decisions for identifiers found only in an archive partition.

A job that was archived and shows up again is either a genuine reopening
(publish again) or the same stale listing resurfacing (block). Rules are
evaluated in order and the first match wins; when in doubt we block.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from .archive import parse_month_key
from .config import REOPEN_FRESH_DAYS, REOPEN_MIN_MONTHS, REOPEN_UNDATED_MIN_MONTHS

PostedDate = Union[str, datetime, None]


@dataclass(frozen=True)
class ReopeningDecision:
    allow: bool
    rule: int
    reason: str


def months_between(month: str, now: datetime) -> int:
    """Calendar-month difference between a YYYY-MM key and now."""
    year, mon = parse_month_key(month)
    return (now.year * 12 + now.month) - (year * 12 + mon)


def parse_posted_date(value: PostedDate) -> Optional[datetime]:
    """
    Parse a source-reported posting timestamp into an aware UTC datetime.

    Accepts datetimes and ISO-8601 strings (a trailing Z is understood).
    Naive values are taken as UTC. Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_since_posted(value: PostedDate, now: datetime) -> Optional[int]:
    """Whole days elapsed since the posting date, or None if absent/unparseable."""
    posted = parse_posted_date(value)
    if posted is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    return (now - posted).days


def decide_reopening(months_since_archived: int, days_since: Optional[int]) -> ReopeningDecision:
    has_posted_date = days_since is not None

    if months_since_archived < REOPEN_MIN_MONTHS:
        return ReopeningDecision(
            False, 1, f"archived {months_since_archived} month(s) ago, too recent to reopen"
        )

    if has_posted_date and days_since <= REOPEN_FRESH_DAYS:
        return ReopeningDecision(
            True, 2, f"fresh source date ({days_since} days old), treating as reopening"
        )

    if months_since_archived >= REOPEN_UNDATED_MIN_MONTHS and not has_posted_date:
        return ReopeningDecision(
            True, 3, f"no source date, archived {months_since_archived} months ago, assuming reopening"
        )

    return ReopeningDecision(False, 4, "previously posted, no evidence of reopening")
