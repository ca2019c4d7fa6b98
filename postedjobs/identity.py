"""Job identifiers derived from a posting's defining attributes."""

import hashlib
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

JOB_ID_LENGTH = 16

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def normalize_text(s: Optional[str]) -> str:
    return " ".join((s or "").strip().lower().split())


REMOTE_SYNS = {"remote", "remote - us", "remote - usa", "fully remote", "remote, us"}


def normalize_location(location: Optional[str]) -> str:
    loc = normalize_text(location)
    if loc in REMOTE_SYNS:
        return "remote"
    return loc


def canonical_url(url: Optional[str]) -> str:
    if not url:
        return ""
    parsed = urlparse(url.strip())
    path = parsed.path.rstrip("/")
    # Query and fragment carry source-specific tracking
    if parsed.scheme and parsed.netloc:
        return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}{path}"
    return path


def compute_job_id(company: str, title: str, location: Optional[str] = None, url: Optional[str] = None) -> str:
    key = "|".join([
        normalize_text(company),
        normalize_text(title),
        normalize_location(location),
        canonical_url(url),
    ])
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:JOB_ID_LENGTH]


def slugify(s: Optional[str]) -> str:
    return _SLUG_RE.sub("-", normalize_text(s)).strip("-")


def legacy_job_id(company: str, title: str, location: Optional[str] = None) -> str:
    """Older company-title-location slug, still present in long-lived stores."""
    parts = [slugify(company), slugify(title)]
    if location:
        parts.append(slugify(normalize_location(location)))
    return "-".join(p for p in parts if p)


def _first(job: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = job.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def job_id_for(job: Dict[str, Any]) -> str:
    """Identifier for a fetched job record (fetcher or board field names)."""
    return compute_job_id(
        _first(job, "employer_name", "company") or "",
        _first(job, "job_title", "title") or "",
        _first(job, "job_city", "location"),
        _first(job, "job_apply_link", "url"),
    )


def legacy_job_id_for(job: Dict[str, Any]) -> str:
    return legacy_job_id(
        _first(job, "employer_name", "company") or "",
        _first(job, "job_title", "title") or "",
        _first(job, "job_city", "location"),
    )
