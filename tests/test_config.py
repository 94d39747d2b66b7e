"""Tests for configuration loading."""

from pathlib import Path

import pytest

from harmony.config import DATA_DIR, Config, load_config, resolve_data_dir


@pytest.fixture
def write_conf(tmp_path):
    def _write(text: str) -> Path:
        path = tmp_path / "harmony.conf"
        path.write_text(text)
        return path
    return _write


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.conf")
        assert config == Config()
        assert config.horizon_days == 60
        assert config.allow_direct_complete is True

    def test_parses_keys(self, write_conf):
        path = write_conf(
            "# Household settings\n"
            "HORIZON_DAYS = 30\n"
            'CURRENT_USER = "user_2"  # the partner\n'
            "ALLOW_DIRECT_COMPLETE = no\n"
            "DATA_DIR = ~/chores # inline comment\n"
        )
        config = load_config(path)
        assert config.horizon_days == 30
        assert config.current_user == "user_2"
        assert config.allow_direct_complete is False
        assert config.data_dir == "~/chores"

    def test_invalid_values_ignored(self, write_conf, caplog):
        path = write_conf("HORIZON_DAYS = soon\nALLOW_DIRECT_COMPLETE = maybe\n")
        config = load_config(path)
        assert config.horizon_days == 60
        assert config.allow_direct_complete is True
        assert "HORIZON_DAYS" in caplog.text

    def test_non_positive_horizon_ignored(self, write_conf):
        assert load_config(write_conf("HORIZON_DAYS = 0\n")).horizon_days == 60

    def test_unknown_keys_and_junk_lines(self, write_conf):
        config = load_config(write_conf("SOMETHING_ELSE = 1\nnot a setting\n"))
        assert config == Config()


class TestResolveDataDir:
    def test_configured(self, tmp_path):
        assert resolve_data_dir(Config(data_dir=str(tmp_path))) == tmp_path

    def test_expands_user_path(self):
        path = resolve_data_dir(Config(data_dir="~/chores"))
        assert path == Path.home() / "chores"

    def test_falls_back_to_default(self):
        assert resolve_data_dir(Config()) == DATA_DIR
