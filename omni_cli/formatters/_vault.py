"""Vault formatters. The payload is the vault tool's raw output."""

import json

from omni_cli.formatters._table import _table, _trunc

_ITEM_TYPES = {1: "login", 2: "note", 3: "card", 4: "identity"}


def format_vault_items(result):
    """Render ``bw list items`` output as a table; fall back to raw text."""
    raw = result.get("output", "")
    try:
        items = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return raw.rstrip("\n")
    if not isinstance(items, list):
        return raw.rstrip("\n")
    if not items:
        return "No vault items."
    cols = [("Name", 30), ("Type", 9), ("Username", 24), ("ID", 0)]
    rows = []
    for item in items:
        if not isinstance(item, dict):
            continue
        login = item.get("login") or {}
        rows.append(
            (
                _trunc(item.get("name") or "", 30),
                _ITEM_TYPES.get(item.get("type"), "-"),
                _trunc(login.get("username") or "-", 24),
                item.get("id", ""),
            )
        )
    return _table(cols, rows, f"Total: {len(rows)} items")


def format_vault_output(result):
    """Plain vault output (``bw get``): printed as-is."""
    return (result.get("output") or "").rstrip("\n")
