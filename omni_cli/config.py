"""
omni-cli shared configuration, constants, and module-level state.
Standalone module — no imports from other project files.
"""

import os
import tempfile

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

ENV_PATH = os.environ.get("OMNI_ENV_PATH") or os.path.join(_PROJECT_ROOT, ".env")


def _unquote(val):
    """Strip one pair of matching surrounding quotes (setup writes 'Basic ...')."""
    if len(val) >= 2 and val[0] == val[-1] and val[0] in ("'", '"'):
        return val[1:-1]
    return val


def load_env():
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = _unquote(val.strip())
    return env


def save_env_value(key, value):
    """Update or add a key in the .env file (atomic write-then-rename)."""
    lines = []
    found = False
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            lines = f.readlines()
    for i, line in enumerate(lines):
        if line.strip().startswith(f"{key}="):
            lines[i] = f"{key}={value}\n"
            found = True
            break
    if not found:
        lines.append(f"{key}={value}\n")
    env_dir = os.path.dirname(ENV_PATH) or "."
    fd, tmp_path = tempfile.mkstemp(dir=env_dir, prefix=".env_tmp_")
    try:
        with os.fdopen(fd, "w") as f:
            f.writelines(lines)
        os.replace(tmp_path, ENV_PATH)
    except Exception:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise
    # Owner-only on Unix/Mac. No-op on Windows.
    try:
        os.chmod(ENV_PATH, 0o600)
    except (OSError, NotImplementedError):
        pass
    env[key] = _unquote(value)


def get_value(key, default=""):
    """Look up a setting: process environment first, then the .env file."""
    value = os.environ.get(key)
    if value:
        return value
    return env.get(key) or default


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = get_value(key, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = get_value(key, None)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key, default):
    """Parse float env values with fallback."""
    raw = get_value(key, None)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.1.0"
CONTRACT_SCHEMA_VERSION = "1.0"

API_PREFIX = "api/v2"
CONTENT_TYPE = "application/json; charset=utf-8"

# Keys read on every call (never cached at import time)
EPICOR_API_KEY_VAR = "EPICOR_API_KEY"
EPICOR_BASIC_AUTH_VAR = "EPICOR_BASIC_AUTH"
EPICOR_BASE_URL_VAR = "EPICOR_BASE_URL"
BW_CLIENTID_VAR = "BW_CLIENTID"
BW_CLIENTSECRET_VAR = "BW_CLIENTSECRET"
MASTER_PASSWORD_VAR = "MASTER_PASSWORD"

REQUIRED_KEYS = (
    EPICOR_API_KEY_VAR,
    EPICOR_BASIC_AUTH_VAR,
    EPICOR_BASE_URL_VAR,
    BW_CLIENTID_VAR,
    BW_CLIENTSECRET_VAR,
    MASTER_PASSWORD_VAR,
)

# ---------------------------------------------------------------------------
# Module-level state (loaded from .env)
# ---------------------------------------------------------------------------

env = load_env()

EPICOR_COMPANY = get_value("EPICOR_COMPANY", "100")
EPICOR_LIBRARY = get_value("EPICOR_LIBRARY", "Omni")
BW_BINARY = get_value("OMNI_BW_BINARY", "bw")
HTTP_TIMEOUT_SECONDS = _env_int("OMNI_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RESPONSE_BYTES = _env_int("OMNI_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
VAULT_TIMEOUT_SECONDS = _env_float("OMNI_VAULT_TIMEOUT_SECONDS", 60.0)
LOG_ENABLED = _env_bool("OMNI_LOG", False)

# ---------------------------------------------------------------------------
# Runtime flags (set by cli.main)
# ---------------------------------------------------------------------------

RUNTIME_QUIET = False
RUNTIME_VERBOSE = False
