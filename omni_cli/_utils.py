"""
Shared pure-utility functions for omni-cli.

Used by api.py and vault.py. Logging goes to stderr as one JSON object per
line so stdout stays clean for command output.
"""

import json
import sys

from omni_cli import config


def _mask_token(token):
    """Show only first 6 chars of a token for safe logging."""
    if not token:
        return ""
    return token[:6] + "..." if len(token) > 6 else token


def log_event(channel, **fields):
    """Emit a structured ``[CHANNEL] {...}`` line to stderr when logging is on."""
    if not config.LOG_ENABLED:
        return
    print(
        f"[{channel}] " + json.dumps(fields, ensure_ascii=False, sort_keys=True),
        file=sys.stderr,
    )


def _parse_case_num(value):
    """Coerce a case number to a positive int. Returns None when invalid."""
    if isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed <= 0 or (isinstance(value, float) and value != parsed):
        return None
    return parsed
