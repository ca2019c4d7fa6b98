"""
Tests for config.py - environment-driven configuration.
"""

from pathlib import Path

from postedjobs.config import DEFAULT_ARCHIVE_THRESHOLD, StoreConfig


class TestStoreConfig:
    """Defaults, derived paths and environment overrides."""

    def test_defaults(self):
        config = StoreConfig()

        assert config.archive_threshold == DEFAULT_ARCHIVE_THRESHOLD == 4500
        assert config.lookback_months == 2
        assert config.active_path == Path("data") / "posted_jobs.json"
        assert config.archive_dir == Path("data") / "archive"

    def test_string_data_dir_coerced(self):
        assert StoreConfig(data_dir="x").active_path == Path("x") / "posted_jobs.json"

    def test_from_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ARCHIVE_THRESHOLD", "1200")
        monkeypatch.setenv("POSTEDJOBS_LOOKBACK_MONTHS", "4")
        monkeypatch.setenv("POSTEDJOBS_DATA_DIR", str(tmp_path / "store"))

        config = StoreConfig.from_env()

        assert config.archive_threshold == 1200
        assert config.lookback_months == 4
        assert config.data_dir == tmp_path / "store"

    def test_explicit_data_dir_wins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("POSTEDJOBS_DATA_DIR", "ignored")

        assert StoreConfig.from_env(tmp_path / "explicit").data_dir == tmp_path / "explicit"

    def test_invalid_threshold_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ARCHIVE_THRESHOLD", "lots")

        assert StoreConfig.from_env().archive_threshold == 4500

    def test_non_positive_threshold_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ARCHIVE_THRESHOLD", "0")

        assert StoreConfig.from_env().archive_threshold == 4500

    def test_dotenv_file_loaded(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        # register the variable so monkeypatch removes whatever .env sets
        monkeypatch.setenv("ARCHIVE_THRESHOLD", "placeholder")
        monkeypatch.delenv("ARCHIVE_THRESHOLD")
        (tmp_path / ".env").write_text("ARCHIVE_THRESHOLD=3000\n", encoding="utf-8")

        assert StoreConfig.from_env().archive_threshold == 3000

    def test_environment_beats_dotenv(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("ARCHIVE_THRESHOLD", "2500")
        (tmp_path / ".env").write_text("ARCHIVE_THRESHOLD=3000\n", encoding="utf-8")

        assert StoreConfig.from_env().archive_threshold == 2500
