"""Tests for vault.py — item types, session lifecycle and guaranteed cleanup.

Mocks at subprocess.run level. Each fake ``bw`` call is keyed on its first
argument (login, unlock, list, get, lock, logout).
"""

import os
import subprocess
from unittest.mock import patch

import pytest

from omni_cli import config, vault
from omni_cli.exceptions import CliError, ConfigurationError, ExternalToolError
from omni_cli.vault import (
    BitwardenCli,
    GetItem,
    ListItems,
    VaultItemType,
    VaultSession,
)

UNLOCK_OK = (
    0,
    'Your vault is now unlocked!\n\n> export BW_SESSION="sess-token-123"\n',
    "",
)


def _fake_bw(**responses):
    """Return (side_effect, calls). *responses* maps step -> (rc, stdout, stderr)."""
    calls = []

    def run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        step = cmd[1]
        result = responses.get(step)
        if isinstance(result, BaseException):
            raise result
        if result is None:
            result = UNLOCK_OK if step == "unlock" else (0, "", "")
        rc, out, err = result
        return subprocess.CompletedProcess(cmd, rc, out, err)

    return run, calls


def _steps(calls):
    return [cmd[1] for cmd, _ in calls]


# ---------------------------------------------------------------------------
# Item types and operations
# ---------------------------------------------------------------------------


class TestVaultItemType:
    @pytest.mark.parametrize("item_type", list(VaultItemType))
    def test_round_trip(self, item_type):
        assert VaultItemType.parse(str(item_type)) is item_type

    def test_thirteen_variants(self):
        assert len(VaultItemType.choices()) == 13
        assert "org-collection" in VaultItemType.choices()

    def test_unknown_names_value(self):
        with pytest.raises(CliError, match="'secret-thing'"):
            VaultItemType.parse("secret-thing")

    def test_case_sensitive(self):
        with pytest.raises(CliError):
            VaultItemType.parse("Password")


class TestOperations:
    def test_list_items_args(self):
        assert ListItems().args() == ["list", "items"]

    def test_get_item_args(self):
        op = GetItem(VaultItemType.ORG_COLLECTION, "CAEL10")
        assert op.args() == ["get", "org-collection", "CAEL10"]
        assert "CAEL10" in op.describe()


class TestVaultSession:
    def test_child_env_carries_token_without_touching_os_environ(self, monkeypatch):
        monkeypatch.delenv("BW_SESSION", raising=False)
        session = VaultSession(token="abc")
        env = session.child_env({"EXTRA": "1"})
        assert env["BW_SESSION"] == "abc"
        assert env["EXTRA"] == "1"
        assert "BW_SESSION" not in os.environ

    def test_child_env_drops_inherited_session(self, monkeypatch):
        monkeypatch.setenv("BW_SESSION", "stale")
        assert "BW_SESSION" not in VaultSession().child_env()


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.usefixtures("bw_env")
class TestRetrieve:
    @patch("omni_cli.vault.subprocess.run")
    def test_get_success_runs_full_sequence(self, mock_run, monkeypatch):
        monkeypatch.delenv("BW_SESSION", raising=False)
        run, calls = _fake_bw(get=(0, "hunter2", ""))
        mock_run.side_effect = run

        out = vault.get_item("password", "CAEL10")

        assert out == "hunter2"
        assert _steps(calls) == ["login", "unlock", "get", "lock", "logout"]
        assert calls[2][0] == ["bw", "get", "password", "CAEL10"]
        assert calls[2][1]["env"]["BW_SESSION"] == "sess-token-123"
        assert "BW_SESSION" not in os.environ

    @patch("omni_cli.vault.subprocess.run")
    def test_login_uses_api_key_credentials(self, mock_run):
        run, calls = _fake_bw()
        mock_run.side_effect = run
        vault.list_items()
        cmd, kwargs = calls[0]
        assert cmd == ["bw", "login", "--apikey"]
        assert kwargs["env"]["BW_CLIENTID"] == "user.client-id"
        assert kwargs["env"]["BW_CLIENTSECRET"] == "client-secret"
        assert kwargs["timeout"] == config.VAULT_TIMEOUT_SECONDS

    @patch("omni_cli.vault.subprocess.run")
    def test_list_items(self, mock_run):
        run, calls = _fake_bw(list=(0, '[{"name": "CAEL10"}]', ""))
        mock_run.side_effect = run
        assert vault.list_items() == '[{"name": "CAEL10"}]'
        assert calls[2][0] == ["bw", "list", "items"]

    @patch("omni_cli.vault.subprocess.run")
    def test_unlock_failure_still_locks_and_logs_out_once(self, mock_run):
        run, calls = _fake_bw(unlock=(1, "", "Invalid master password."))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="Failed to unlock vault"):
            vault.list_items()

        steps = _steps(calls)
        assert steps == ["login", "unlock", "lock", "logout"]
        assert steps.count("lock") == 1
        assert steps.count("logout") == 1

    @patch("omni_cli.vault.subprocess.run")
    def test_missing_session_key_stops_before_operate(self, mock_run):
        run, calls = _fake_bw(unlock=(0, "Your vault is now unlocked!", ""))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="session key"):
            vault.get_item(VaultItemType.PASSWORD, "CAEL10")

        assert "get" not in _steps(calls)
        assert _steps(calls)[-2:] == ["lock", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_login_failure_still_cleans_up(self, mock_run):
        run, calls = _fake_bw(login=(1, "", "Invalid client id"))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="Failed to login") as exc_info:
            vault.list_items()

        assert "Invalid client id" in str(exc_info.value)
        assert _steps(calls) == ["login", "lock", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_operate_failure_reports_item(self, mock_run):
        run, calls = _fake_bw(get=(1, "", "Not found."))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="CAEL10"):
            vault.get_item("item", "CAEL10")

        assert _steps(calls)[-2:] == ["lock", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_cleanup_failure_after_success_is_raised(self, mock_run):
        run, calls = _fake_bw(lock=(1, "", "lock broke"))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="Failed to lock vault"):
            vault.list_items()

        assert _steps(calls)[-2:] == ["lock", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_cleanup_failure_after_error_is_a_warning(self, mock_run, capsys):
        run, _ = _fake_bw(get=(1, "", "Not found."), logout=(1, "", "logout broke"))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="Failed to get vault"):
            vault.get_item("item", "CAEL10")

        err = capsys.readouterr().err
        assert "[WARN] Vault cleanup:" in err
        assert "Failed to logout" in err

    @patch("omni_cli.vault.subprocess.run")
    def test_cleanup_warning_suppressed_when_quiet(self, mock_run, monkeypatch, capsys):
        monkeypatch.setattr(config, "RUNTIME_QUIET", True)
        run, _ = _fake_bw(get=(1, "", "x"), lock=(1, "", "y"))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError):
            vault.get_item("item", "CAEL10")

        assert capsys.readouterr().err == ""

    @patch("omni_cli.vault.subprocess.run")
    def test_binary_not_found(self, mock_run):
        mock_run.side_effect = FileNotFoundError("bw")
        with pytest.raises(ExternalToolError, match="not found"):
            vault.list_items()

    @patch("omni_cli.vault.subprocess.run")
    def test_os_error_on_lock_still_logs_out(self, mock_run):
        run, calls = _fake_bw(lock=BlockingIOError(11, "Resource temporarily unavailable"))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="during lock"):
            vault.list_items()

        steps = _steps(calls)
        assert steps == ["login", "unlock", "list", "lock", "logout"]
        assert steps.count("logout") == 1

    @patch("omni_cli.vault.subprocess.run")
    def test_permission_error_is_tool_error(self, mock_run):
        run, calls = _fake_bw(login=PermissionError(13, "Permission denied"))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="Permission denied"):
            vault.list_items()

        assert _steps(calls) == ["login", "lock", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_unexpected_lock_failure_still_logs_out(self, mock_run):
        run, calls = _fake_bw()
        mock_run.side_effect = run

        with patch("omni_cli.vault.lock", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError, match="boom"):
                vault.list_items()

        assert _steps(calls) == ["login", "unlock", "list", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_timeout(self, mock_run):
        run, calls = _fake_bw(list=subprocess.TimeoutExpired(["bw", "list"], 60))
        mock_run.side_effect = run

        with pytest.raises(ExternalToolError, match="timed out"):
            vault.list_items()

        assert _steps(calls)[-2:] == ["lock", "logout"]

    @patch("omni_cli.vault.subprocess.run")
    def test_master_password_not_logged(self, mock_run, monkeypatch, capsys):
        monkeypatch.setattr(config, "LOG_ENABLED", True)
        run, _ = _fake_bw()
        mock_run.side_effect = run

        vault.list_items()

        err = capsys.readouterr().err
        assert "[VAULT]" in err
        assert "s3cret-pw" not in err
        assert '"***"' in err

    def test_custom_binary(self):
        cli = BitwardenCli(binary="/opt/bw", timeout=5)
        with patch("omni_cli.vault.subprocess.run") as mock_run:
            run, calls = _fake_bw()
            mock_run.side_effect = run
            vault.list_items(cli=cli)
        assert all(cmd[0] == "/opt/bw" for cmd, _ in calls)
        assert all(kwargs["timeout"] == 5 for _, kwargs in calls)


class TestMissingCredentials:
    @patch("omni_cli.vault.subprocess.run")
    def test_no_process_started(self, mock_run):
        with pytest.raises(ConfigurationError, match="BW_CLIENTID, BW_CLIENTSECRET"):
            vault.list_items()
        mock_run.assert_not_called()

    @patch("omni_cli.vault.subprocess.run")
    def test_missing_master_password_after_login(self, mock_run, monkeypatch):
        monkeypatch.setattr(
            config, "env", {"BW_CLIENTID": "id", "BW_CLIENTSECRET": "secret"}
        )
        run, calls = _fake_bw()
        mock_run.side_effect = run

        with pytest.raises(ConfigurationError, match="MASTER_PASSWORD"):
            vault.list_items()

        assert _steps(calls) == ["login", "lock", "logout"]
