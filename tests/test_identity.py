"""
Tests for identity.py - job identifiers.
"""

from postedjobs.identity import (
    canonical_url,
    compute_job_id,
    job_id_for,
    legacy_job_id,
    legacy_job_id_for,
    normalize_location,
)


class TestComputeJobId:
    """Identifiers are stable under cosmetic differences."""

    def test_deterministic_hex(self):
        job_id = compute_job_id("Acme", "Engineer", "Remote", "https://example.com/jobs/1")

        assert len(job_id) == 16
        assert all(c in "0123456789abcdef" for c in job_id)
        assert job_id == compute_job_id("Acme", "Engineer", "Remote", "https://example.com/jobs/1")

    def test_case_and_whitespace_insensitive(self):
        a = compute_job_id("Acme  Corp", " Software Engineer", "remote", None)
        b = compute_job_id("acme corp", "software   engineer", "Remote", None)

        assert a == b

    def test_tracking_params_ignored(self):
        a = compute_job_id("Acme", "Engineer", None, "https://Boards.Greenhouse.io/acme/jobs/1?gh_src=x")
        b = compute_job_id("Acme", "Engineer", None, "https://boards.greenhouse.io/acme/jobs/1/")

        assert a == b

    def test_different_titles_differ(self):
        assert compute_job_id("Acme", "Engineer") != compute_job_id("Acme", "Manager")

    def test_remote_synonyms(self):
        assert normalize_location("Remote - USA") == "remote"
        assert normalize_location("New York, NY") == "new york, ny"

    def test_canonical_url_without_scheme(self):
        assert canonical_url("/jobs/1/") == "/jobs/1"
        assert canonical_url(None) == ""


class TestLegacyJobId:
    """Older slug identifiers."""

    def test_slug_format(self):
        assert legacy_job_id("Acme Corp", "Sr. Software Engineer", "Remote - US") == "acme-corp-sr-software-engineer-remote"

    def test_without_location(self):
        assert legacy_job_id("Acme", "Engineer") == "acme-engineer"


class TestJobRecords:
    """Fetcher and board field names produce the same identifiers."""

    def test_field_aliases(self):
        fetched = {
            "employer_name": "Acme",
            "job_title": "Engineer",
            "job_city": "Remote",
            "job_apply_link": "https://example.com/jobs/1",
        }
        board = {
            "company": "acme",
            "title": "engineer",
            "location": "remote",
            "url": "https://example.com/jobs/1",
        }

        assert job_id_for(fetched) == job_id_for(board)
        assert legacy_job_id_for(fetched) == legacy_job_id_for(board) == "acme-engineer-remote"

    def test_blank_fields_fall_through(self):
        job = {"employer_name": "  ", "company": "Acme", "title": "Engineer"}

        assert job_id_for(job) == compute_job_id("Acme", "Engineer")
