"""
Interactive setup wizard for omni-cli.
Writes Bitwarden and Epicor settings to .env. Values given as flags are
used as-is; anything missing is prompted for (blank keeps the current value).
"""

import base64
import getpass
import shutil

from omni_cli import config
from omni_cli._utils import _mask_token

# (.env key, namespace attribute, prompt label, secret)
_FIELDS = [
    (config.BW_CLIENTID_VAR, "bw_client_id", "Bitwarden client ID", False),
    (config.BW_CLIENTSECRET_VAR, "bw_client_secret", "Bitwarden client secret", True),
    (config.MASTER_PASSWORD_VAR, "bw_master_password", "Bitwarden master password", True),
    (config.EPICOR_BASE_URL_VAR, "epicor_base_url", "Epicor base URL", False),
    (config.EPICOR_API_KEY_VAR, "epicor_api_key", "Epicor API key", True),
]


def generate_basic_auth(username, password):
    """Return an HTTP basic-auth header value for *username*:*password*."""
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


def _prompt(label, current, secret):
    """Ask for a value. Blank input (or EOF) keeps *current*."""
    hint = ""
    if current:
        hint = f" [{_mask_token(current) if secret else current}]"
    try:
        if secret:
            raw = getpass.getpass(f"  {label}{hint}: ")
        else:
            raw = input(f"  {label}{hint}: ")
    except EOFError:
        raw = ""
    return raw.strip() or current


def _collect(ns):
    values = {}
    for key, attr, label, secret in _FIELDS:
        given = getattr(ns, attr, None)
        values[key] = given if given else _prompt(label, config.get_value(key), secret)

    username = getattr(ns, "epicor_username", None)
    password = getattr(ns, "epicor_password", None)
    if not (username and password):
        print("  Epicor credentials (used to build EPICOR_BASIC_AUTH; blank keeps current):")
        username = username or _prompt("Epicor username", "", False)
        password = password or _prompt("Epicor password", "", True)
    if username and password:
        values[config.EPICOR_BASIC_AUTH_VAR] = generate_basic_auth(username, password)
    else:
        values[config.EPICOR_BASIC_AUTH_VAR] = config.get_value(config.EPICOR_BASIC_AUTH_VAR)
    return values


def cmd_setup(ns):
    print("=== omni-cli setup ===\n")
    values = _collect(ns)

    saved = []
    for key, value in values.items():
        if not value:
            continue
        if key == config.EPICOR_BASIC_AUTH_VAR:
            config.save_env_value(key, f"'{value}'")
        else:
            config.save_env_value(key, value)
        saved.append(key)
    print(f"\nSaved {len(saved)} setting(s) to {config.ENV_PATH}")

    missing = [k for k in config.REQUIRED_KEYS if not values.get(k)]
    if missing:
        print(f"  Still missing: {', '.join(missing)}")

    if shutil.which(config.BW_BINARY) is None:
        print(
            f"\n[WARN] Bitwarden CLI '{config.BW_BINARY}' not found on PATH. "
            "Install it from https://bitwarden.com/help/cli/ before using 'omni vault'."
        )
    return {"ok": not missing, "saved": saved, "missing": missing}
