"""Tests for configuration loading."""

import logging
from datetime import timezone
from pathlib import Path

import pytest
from rich.logging import RichHandler

from quietly.config import Config, get_config, reset_config
from quietly.log import configure_logging

ENV_VARS = (
    "QUIETLY_DB_PATH",
    "QUIETLY_USER_ID",
    "QUIETLY_TIMEZONE",
    "QUIETLY_MAX_PAGE",
    "QUIETLY_MAX_GOAL_TARGET",
    "QUIETLY_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestConfig:
    """Tests for Config.from_env."""

    def test_defaults(self):
        config = Config.from_env()

        assert config.db_path == Path.home() / ".quietly" / "quietly.db"
        assert config.user_id is None
        assert config.timezone_name == "UTC"
        assert config.tz is timezone.utc
        assert config.max_page == 50000
        assert config.max_goal_target == 100000
        assert config.log_level == "WARNING"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("QUIETLY_DB_PATH", str(tmp_path / "q.db"))
        monkeypatch.setenv("QUIETLY_USER_ID", "reader-42")
        monkeypatch.setenv("QUIETLY_MAX_PAGE", "1000")
        monkeypatch.setenv("QUIETLY_LOG_LEVEL", "debug")

        config = Config.from_env()

        assert config.db_path == tmp_path / "q.db"
        assert config.user_id == "reader-42"
        assert config.max_page == 1000
        assert config.log_level == "DEBUG"

    def test_empty_user_id_is_none(self, monkeypatch):
        monkeypatch.setenv("QUIETLY_USER_ID", "")
        assert Config.from_env().user_id is None

    def test_validate_ok(self, monkeypatch, tmp_path):
        monkeypatch.setenv("QUIETLY_DB_PATH", str(tmp_path / "sub" / "q.db"))

        assert Config.from_env().validate() == []
        assert (tmp_path / "sub").exists()

    def test_validate_errors(self, monkeypatch, tmp_path):
        monkeypatch.setenv("QUIETLY_DB_PATH", str(tmp_path / "q.db"))
        monkeypatch.setenv("QUIETLY_TIMEZONE", "Nowhere/Special")
        monkeypatch.setenv("QUIETLY_MAX_GOAL_TARGET", "0")
        monkeypatch.setenv("QUIETLY_LOG_LEVEL", "LOUD")

        errors = Config.from_env().validate()

        assert len(errors) == 3
        assert any("Nowhere/Special" in e for e in errors)

    def test_global_config_cached(self, monkeypatch):
        monkeypatch.setenv("QUIETLY_USER_ID", "first")
        assert get_config().user_id == "first"

        monkeypatch.setenv("QUIETLY_USER_ID", "second")
        assert get_config().user_id == "first"

        reset_config()
        assert get_config().user_id == "second"


class TestLogging:
    """Tests for logging setup."""

    def test_configure_logging_once(self):
        logger = configure_logging("INFO")
        configure_logging("DEBUG")

        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert logger.level == logging.DEBUG
        assert logger.name == "quietly"
        assert not logger.propagate
