"""Tests for config.py — .env loading, saving, and value lookup."""

import os
import stat
import sys

import pytest

from omni_cli import config


class TestUnquote:
    def test_single_quotes(self):
        assert config._unquote("'Basic abc'") == "Basic abc"

    def test_double_quotes(self):
        assert config._unquote('"value"') == "value"

    def test_mismatched_quotes_kept(self):
        assert config._unquote("'value\"") == "'value\""

    def test_plain(self):
        assert config._unquote("value") == "value"


class TestLoadEnv:
    def test_missing_file(self):
        assert config.load_env() == {}

    def test_parses_keys_comments_and_quotes(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.env"
        path.write_text(
            "# comment\n"
            "EPICOR_BASE_URL=https://erp.example.com\n"
            "EPICOR_BASIC_AUTH='Basic dXNlcjpwYXNz'\n"
            "\n"
            "not a pair\n"
            "TOKEN=a=b\n"
        )
        monkeypatch.setattr(config, "ENV_PATH", str(path))
        env = config.load_env()
        assert env == {
            "EPICOR_BASE_URL": "https://erp.example.com",
            "EPICOR_BASIC_AUTH": "Basic dXNlcjpwYXNz",
            "TOKEN": "a=b",
        }


class TestSaveEnvValue:
    def test_creates_file(self):
        config.save_env_value("EPICOR_API_KEY", "key-1")
        with open(config.ENV_PATH) as f:
            assert f.read() == "EPICOR_API_KEY=key-1\n"
        assert config.env["EPICOR_API_KEY"] == "key-1"

    def test_updates_existing_key_in_place(self):
        with open(config.ENV_PATH, "w") as f:
            f.write("A=1\nEPICOR_API_KEY=old\nB=2\n")
        config.save_env_value("EPICOR_API_KEY", "new")
        with open(config.ENV_PATH) as f:
            assert f.read() == "A=1\nEPICOR_API_KEY=new\nB=2\n"

    def test_quoted_value_unquoted_in_memory(self):
        config.save_env_value("EPICOR_BASIC_AUTH", "'Basic abc'")
        with open(config.ENV_PATH) as f:
            assert "EPICOR_BASIC_AUTH='Basic abc'" in f.read()
        assert config.env["EPICOR_BASIC_AUTH"] == "Basic abc"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_owner_only_permissions(self):
        config.save_env_value("MASTER_PASSWORD", "pw")
        mode = stat.S_IMODE(os.stat(config.ENV_PATH).st_mode)
        assert mode == 0o600

    def test_no_temp_files_left(self, tmp_path):
        config.save_env_value("A", "1")
        leftovers = [p.name for p in tmp_path.iterdir() if p.name.startswith(".env_tmp_")]
        assert leftovers == []


class TestGetValue:
    def test_process_environment_wins(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"EPICOR_API_KEY": "from-file"})
        monkeypatch.setenv("EPICOR_API_KEY", "from-env")
        assert config.get_value("EPICOR_API_KEY") == "from-env"

    def test_falls_back_to_env_file(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"EPICOR_API_KEY": "from-file"})
        assert config.get_value("EPICOR_API_KEY") == "from-file"

    def test_default(self):
        assert config.get_value("EPICOR_API_KEY") == ""
        assert config.get_value("EPICOR_API_KEY", None) is None


class TestTypedEnv:
    def test_env_int(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"OMNI_HTTP_TIMEOUT_SECONDS": "5"})
        assert config._env_int("OMNI_HTTP_TIMEOUT_SECONDS", 30) == 5

    def test_env_int_invalid_uses_default(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"OMNI_HTTP_TIMEOUT_SECONDS": "soon"})
        assert config._env_int("OMNI_HTTP_TIMEOUT_SECONDS", 30) == 30

    def test_env_float(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"OMNI_VAULT_TIMEOUT_SECONDS": "2.5"})
        assert config._env_float("OMNI_VAULT_TIMEOUT_SECONDS", 60.0) == 2.5

    def test_env_bool(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"OMNI_LOG": "yes"})
        assert config._env_bool("OMNI_LOG") is True
        monkeypatch.setattr(config, "env", {"OMNI_LOG": "0"})
        assert config._env_bool("OMNI_LOG") is False
        monkeypatch.setattr(config, "env", {})
        assert config._env_bool("OMNI_LOG", True) is True
