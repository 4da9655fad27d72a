"""Tests for configuration module."""

import pytest
from pydantic import ValidationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Ensure no .env file interferes and clear relevant env vars."""
    monkeypatch.chdir(tmp_path)
    for var in [
        "DATABASE_PATH", "LOG_LEVEL", "MAX_RETRY_ATTEMPTS", "STORE_RETRY_ATTEMPTS",
        "STORE_TIMEOUT_SECONDS", "REMOTE_TIMEOUT_SECONDS", "ISSUES_DIR",
        "SUMMARY_ISSUE_LIMIT", "PROJECT_DEDUP_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)


def _load_config():
    from signal_ingest.config import Config
    return Config(_env_file=None)


class TestConfig:
    def test_defaults(self):
        config = _load_config()
        assert config.database_path == "data/signals.db"
        assert config.log_level == "INFO"
        assert config.max_retry_attempts == 2
        assert config.store_retry_attempts == 0
        assert config.summary_issue_limit == 10
        assert config.project_dedup_key == "state_date"
        assert config.project_key_includes_date is True

    def test_legacy_project_key(self, monkeypatch):
        monkeypatch.setenv("PROJECT_DEDUP_KEY", "state")
        config = _load_config()
        assert config.project_key_includes_date is False

    def test_unknown_project_key_rejected(self, monkeypatch):
        monkeypatch.setenv("PROJECT_DEDUP_KEY", "content_hash")
        with pytest.raises(ValidationError):
            _load_config()

    @pytest.mark.parametrize("level,should_pass", [
        ("DEBUG", True),
        ("info", True),
        ("Warning", True),
        ("ERROR", True),
        ("VERBOSE", False),
        ("", False),
    ])
    def test_log_level(self, monkeypatch, level, should_pass):
        monkeypatch.setenv("LOG_LEVEL", level)
        if should_pass:
            assert _load_config().log_level == level.upper()
        else:
            with pytest.raises(ValidationError):
                _load_config()

    @pytest.mark.parametrize("var", ["MAX_RETRY_ATTEMPTS", "STORE_RETRY_ATTEMPTS"])
    @pytest.mark.parametrize("value,should_pass", [
        ("0", True),
        ("5", True),
        ("6", False),
        ("-1", False),
    ])
    def test_retry_attempt_bounds(self, monkeypatch, var, value, should_pass):
        monkeypatch.setenv(var, value)
        if should_pass:
            config = _load_config()
            assert getattr(config, var.lower()) == int(value)
        else:
            with pytest.raises(ValidationError):
                _load_config()

    @pytest.mark.parametrize("var", ["STORE_TIMEOUT_SECONDS", "REMOTE_TIMEOUT_SECONDS"])
    def test_timeouts_must_be_positive(self, monkeypatch, var):
        monkeypatch.setenv(var, "0")
        with pytest.raises(ValidationError):
            _load_config()

    @pytest.mark.parametrize("value", ["0", "101"])
    def test_summary_issue_limit_bounds(self, monkeypatch, value):
        monkeypatch.setenv("SUMMARY_ISSUE_LIMIT", value)
        with pytest.raises(ValidationError):
            _load_config()

    def test_database_parent_dir_created(self, monkeypatch, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "signals.db"
        monkeypatch.setenv("DATABASE_PATH", str(db_path))
        config = _load_config()
        assert config.database_path == str(db_path)
        assert db_path.parent.is_dir()
