"""Tests for settings loading (yipcvars/config.py) and the --db override."""

from argparse import Namespace
from pathlib import Path

from yipcvars.cli.__main__ import load_settings
from yipcvars.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        settings = Settings()
        assert settings.db_path is None
        assert settings.busy_timeout_ms == 5000
        assert settings.log_level == "WARNING"

    def test_environment_prefix(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("YIP_DB_PATH", "/srv/yip/cms.sqlite")
        monkeypatch.setenv("YIP_BUSY_TIMEOUT_MS", "100")
        settings = Settings()
        assert settings.db_path == Path("/srv/yip/cms.sqlite")
        assert settings.busy_timeout_ms == 100

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("YIP_LOG_LEVEL=DEBUG\n")
        assert Settings().log_level == "DEBUG"

    def test_get_settings_cached(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert get_settings() is get_settings()


class TestLoadSettings:
    def test_db_flag_overrides_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("YIP_DB_PATH", "/from/env.sqlite")
        settings = load_settings(Namespace(db=str(tmp_path / "flag.sqlite")))
        assert settings.db_path == tmp_path / "flag.sqlite"

    def test_environment_used_without_flag(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("YIP_DB_PATH", "/from/env.sqlite")
        assert load_settings(Namespace(db=None)).db_path == Path("/from/env.sqlite")
