"""
Tests for filters.py - batch filtering against the store.
"""

from postedjobs.filters import dedupe_batch, filter_unposted, posted_date_of
from postedjobs.identity import job_id_for, legacy_job_id_for


class TestPostedDateOf:
    def test_board_field(self):
        assert posted_date_of({"date_posted": "2026-10-01"}) == "2026-10-01"

    def test_fetcher_field(self):
        assert posted_date_of({"job_posted_at_datetime_utc": "2026-10-01T00:00:00Z"}) == "2026-10-01T00:00:00Z"

    def test_absent(self):
        assert posted_date_of({"title": "x"}) is None


class TestDedupeBatch:
    def test_keeps_first_occurrence(self, sample_jobs):
        repeat = dict(sample_jobs[0], job_title="software engineer")

        result = dedupe_batch([sample_jobs[0], sample_jobs[1], repeat])

        assert result == sample_jobs

    def test_custom_key(self):
        jobs = [{"k": 1}, {"k": 2}, {"k": 1}]

        assert dedupe_batch(jobs, key_fn=lambda j: str(j["k"])) == [{"k": 1}, {"k": 2}]


class TestFilterUnposted:
    def test_skips_posted_jobs(self, make_store, sample_jobs):
        store = make_store()
        store.insert(job_id_for(sample_jobs[0]))

        assert filter_unposted(sample_jobs, store) == [sample_jobs[1]]

    def test_skips_legacy_identifier_matches(self, make_store, sample_jobs):
        store = make_store()
        store.insert(legacy_job_id_for(sample_jobs[1]))

        assert filter_unposted(sample_jobs, store) == [sample_jobs[0]]
        assert filter_unposted(sample_jobs, store, check_legacy=False) == sample_jobs

    def test_does_not_mutate_store(self, make_store, sample_jobs):
        store = make_store()

        filter_unposted(sample_jobs, store)

        assert len(store) == 0

    def test_all_new(self, make_store, sample_jobs):
        assert filter_unposted(sample_jobs, make_store()) == sample_jobs
