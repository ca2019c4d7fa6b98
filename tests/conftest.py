"""
Pytest configuration and shared fixtures.
"""

import os
import time

import pytest
from datetime import datetime
from typing import List

from postedjobs.config import StoreConfig
from postedjobs.logger import StructuredLogger, get_logger, reset_logger
from postedjobs.store import PostedJobsStore

FIXED_NOW = datetime(2026, 10, 15, 12, 0, 0)


@pytest.fixture(autouse=True)
def quiet_global_logger(tmp_path):
    """Keep the global logger off the console and out of the repo's logs/."""
    reset_logger()
    get_logger(log_dir=tmp_path / "global_logs", enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    return StructuredLogger(
        name="postedjobs.test",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def pacific_tz():
    """Run with a local timezone well behind UTC."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset unavailable on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "America/Los_Angeles"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


@pytest.fixture
def config(tmp_path) -> StoreConfig:
    return StoreConfig(data_dir=tmp_path / "data")


@pytest.fixture
def make_store(config, quiet_logger, clock):
    """Factory for loaded stores sharing the test config, logger and clock."""
    def _make(cfg: StoreConfig = None) -> PostedJobsStore:
        return PostedJobsStore.open(cfg or config, logger=quiet_logger, clock=clock)
    return _make


def job_ids(count: int, prefix: str = "job") -> List[str]:
    """Identifiers whose lexicographic order matches their numeric order."""
    return [f"{prefix}-{i:05d}" for i in range(count)]


@pytest.fixture
def ids_factory():
    return job_ids


@pytest.fixture
def sample_jobs() -> list:
    """Job records as fetchers hand them over."""
    return [
        {
            "employer_name": "Acme Corp",
            "job_title": "Software Engineer",
            "job_city": "Remote",
            "job_apply_link": "https://boards.greenhouse.io/acme/jobs/12345?gh_src=abc",
            "job_posted_at_datetime_utc": "2026-10-10T09:00:00Z",
        },
        {
            "company": "Beta",
            "title": "Product Manager",
            "location": "New York, NY",
            "url": "https://jobs.lever.co/beta/67890",
            "date_posted": "2026-10-01",
        },
    ]
