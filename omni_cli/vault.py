"""
Bitwarden vault access for omni-cli.

Every operation runs inside its own vault session:
login -> unlock -> operate -> lock -> logout.

The session token lives on a VaultSession value that is passed to each step
and handed to child processes through their own environment. ``os.environ``
of this process is never modified. Once login has been attempted, lock and
logout run exactly once, whatever happens in between.
"""

from __future__ import annotations

import os
import re
import subprocess
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from omni_cli import config
from omni_cli._utils import log_event
from omni_cli.exceptions import CliError, ConfigurationError, ExternalToolError

_SESSION_RE = re.compile(r'export BW_SESSION="([^"]+)"')
_MAX_DETAIL_LEN = 300


# ---------------------------------------------------------------------------
# Item types and operations
# ---------------------------------------------------------------------------


class VaultItemType(Enum):
    """Object kinds accepted by ``bw get``. Value is the canonical CLI string."""

    ITEM = "item"
    USERNAME = "username"
    PASSWORD = "password"
    URI = "uri"
    TOTP = "totp"
    EXPOSED = "exposed"
    ATTACHMENT = "attachment"
    FOLDER = "folder"
    COLLECTION = "collection"
    ORGANIZATION = "organization"
    ORG_COLLECTION = "org-collection"
    TEMPLATE = "template"
    FINGERPRINT = "fingerprint"

    def __str__(self):
        return self.value

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, text) -> VaultItemType:
        """Parse a canonical string. Raises CliError naming the bad value."""
        try:
            return cls(text)
        except ValueError:
            raise CliError(
                f"[ERROR] '{text}' is not a valid vault item type. "
                f"Valid: {', '.join(cls.choices())}"
            ) from None


@dataclass(frozen=True)
class ListItems:
    """``bw list items``: every item in the vault as a JSON array."""

    step = "list"

    def args(self) -> list[str]:
        return ["list", "items"]

    def describe(self) -> str:
        return "list vault items"


@dataclass(frozen=True)
class GetItem:
    """``bw get <type> <name>``: one object of the given type."""

    item_type: VaultItemType
    name: str

    step = "get"

    def args(self) -> list[str]:
        return ["get", str(self.item_type), self.name]

    def describe(self) -> str:
        return f"get vault {self.item_type} '{self.name}'"


VaultOperation = ListItems | GetItem


# ---------------------------------------------------------------------------
# Session and process runner
# ---------------------------------------------------------------------------


@dataclass
class VaultSession:
    """State of one login..logout cycle. Owned by a single retrieve() call."""

    token: str | None = None
    login_attempted: bool = False
    logged_in: bool = False
    unlocked: bool = False

    def child_env(self, extra=None) -> dict[str, str]:
        """Environment for a ``bw`` child process. Never touches os.environ."""
        env = dict(os.environ)
        env.pop("BW_SESSION", None)
        if extra:
            env.update(extra)
        if self.token:
            env["BW_SESSION"] = self.token
        return env


class BitwardenCli:
    """Thin wrapper around the ``bw`` binary."""

    def __init__(self, binary=None, timeout=None):
        self.binary = binary or config.BW_BINARY
        self.timeout = config.VAULT_TIMEOUT_SECONDS if timeout is None else timeout

    def run(self, args, *, env, step, log_args=None):
        cmd = [self.binary, *args]
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
                check=False,
            )
        except FileNotFoundError as e:
            raise ExternalToolError(
                f"[ERROR] Vault tool '{self.binary}' not found. "
                "Install the Bitwarden CLI and make sure it is on PATH."
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalToolError(
                f"[ERROR] Vault tool timed out after {self.timeout} seconds during {step}."
            ) from e
        except OSError as e:
            raise ExternalToolError(
                f"[ERROR] Could not run vault tool '{self.binary}' during {step}: {e}"
            ) from e
        log_event(
            "VAULT",
            step=step,
            args=log_args if log_args is not None else list(args),
            exit_code=proc.returncode,
            ok=proc.returncode == 0,
        )
        return proc


def _failure(message, proc):
    """Build an ExternalToolError message from a failed process (stderr only)."""
    detail = (proc.stderr or "").strip()
    if len(detail) > _MAX_DETAIL_LEN:
        detail = detail[:_MAX_DETAIL_LEN] + "... [truncated]"
    text = f"[ERROR] {message} (exit code {proc.returncode})."
    if detail:
        text += f"\n{detail}"
    return text


def _require(*keys):
    """Return the values of *keys*; raise ConfigurationError naming any missing."""
    values = [config.get_value(k) for k in keys]
    missing = [k for k, v in zip(keys, values) if not v]
    if missing:
        raise ConfigurationError(
            f"[SETUP_NEEDED] {', '.join(missing)} not set.\n  Run: omni setup"
        )
    return values


# ---------------------------------------------------------------------------
# Session steps
# ---------------------------------------------------------------------------


def login(session, cli):
    client_id, client_secret = _require(config.BW_CLIENTID_VAR, config.BW_CLIENTSECRET_VAR)
    session.login_attempted = True
    proc = cli.run(
        ["login", "--apikey"],
        env=session.child_env(
            {config.BW_CLIENTID_VAR: client_id, config.BW_CLIENTSECRET_VAR: client_secret}
        ),
        step="login",
    )
    if proc.returncode != 0:
        raise ExternalToolError(_failure("Failed to login with API key", proc))
    session.logged_in = True


def unlock(session, cli):
    (password,) = _require(config.MASTER_PASSWORD_VAR)
    proc = cli.run(
        ["unlock", password],
        env=session.child_env(),
        step="unlock",
        log_args=["unlock", "***"],
    )
    if proc.returncode != 0:
        raise ExternalToolError(_failure("Failed to unlock vault", proc))
    match = _SESSION_RE.search(proc.stdout or "")
    if not match:
        raise ExternalToolError(
            "[ERROR] Failed to find session key in vault unlock output "
            '(expected export BW_SESSION="...").'
        )
    session.token = match.group(1)
    session.unlocked = True


def operate(session, operation, cli):
    """Run the requested operation and return the tool's raw stdout."""
    proc = cli.run(operation.args(), env=session.child_env(), step=operation.step)
    if proc.returncode != 0:
        raise ExternalToolError(_failure(f"Failed to {operation.describe()}", proc))
    return proc.stdout


def lock(session, cli):
    proc = cli.run(["lock"], env=session.child_env(), step="lock")
    if proc.returncode != 0:
        raise ExternalToolError(_failure("Failed to lock vault", proc))
    session.unlocked = False


def logout(session, cli):
    proc = cli.run(["logout"], env=session.child_env(), step="logout")
    if proc.returncode != 0:
        raise ExternalToolError(_failure("Failed to logout", proc))
    session.logged_in = False


def _attempt(step, session, cli, *, warn):
    """Run one cleanup step. Its ExternalToolError is returned, not raised."""
    try:
        step(session, cli)
    except ExternalToolError as e:
        if warn and not config.RUNTIME_QUIET:
            print(f"[WARN] Vault cleanup: {e}", file=sys.stderr)
        return e
    return None


def _cleanup(session, cli, *, raise_errors):
    """Lock then logout. Logout runs even if lock raised; the first failure is kept."""
    if not session.login_attempted:
        return
    warn = not raise_errors
    lock_error = logout_error = None
    try:
        lock_error = _attempt(lock, session, cli, warn=warn)
    finally:
        try:
            logout_error = _attempt(logout, session, cli, warn=warn)
        finally:
            session.token = None
    first_error = lock_error or logout_error
    if first_error is not None and raise_errors:
        raise first_error


@contextmanager
def vault_session(cli=None):
    """Yield an unlocked VaultSession; lock and logout on the way out.

    If the body (or login/unlock) raised, cleanup errors are reported as
    warnings and that exception propagates. Otherwise the first
    cleanup error is raised.
    """
    cli = cli or BitwardenCli()
    session = VaultSession()
    try:
        login(session, cli)
        unlock(session, cli)
        yield session
    except BaseException:
        _cleanup(session, cli, raise_errors=False)
        raise
    _cleanup(session, cli, raise_errors=True)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def retrieve(operation, *, cli=None):
    """Run *operation* inside a fresh vault session and return raw stdout."""
    cli = cli or BitwardenCli()
    with vault_session(cli) as session:
        return operate(session, operation, cli)


def list_items(*, cli=None):
    return retrieve(ListItems(), cli=cli)


def get_item(item_type, name, *, cli=None):
    if not isinstance(item_type, VaultItemType):
        item_type = VaultItemType.parse(item_type)
    return retrieve(GetItem(item_type, name), cli=cli)
