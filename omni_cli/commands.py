"""
Command implementations for omni-cli.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in client.py (OmniClient). These thin wrappers
handle argparse → keyword args, format selection, and formatter dispatch.
Errors propagate to cli.main, which prints them and sets the exit code.
"""

from omni_cli.client import OmniClient
from omni_cli.formatters import (
    format_case_status,
    format_complete_task,
    format_last_comment,
    format_vault_items,
    format_vault_output,
    mutation_response,
    output,
)


def _get_client():
    return OmniClient()


# ---------------------------------------------------------------------------
# Vault commands
# ---------------------------------------------------------------------------


def cmd_vault_list(ns):
    output(_get_client().list_vault_items(), format_vault_items, ns.format)


def cmd_vault_get(ns):
    result = _get_client().get_vault_item(ns.item_type, ns.name)
    output(result, format_vault_output, ns.format)


# ---------------------------------------------------------------------------
# Case commands
# ---------------------------------------------------------------------------


def cmd_complete_task(ns):
    result = _get_client().complete_task(ns.case_number, ns.assign_to, ns.comment)
    output(result, format_complete_task, ns.format)


def cmd_add_comment(ns):
    result = _get_client().add_comment(ns.case_number, ns.comment)
    mutation_response("Comment Added to Case", ns.case_number, None, result, ns.format)


def cmd_get_status(ns):
    output(_get_client().get_case_status(ns.case_number), format_case_status, ns.format)


def cmd_get_last_comment(ns):
    output(_get_client().get_last_comment(ns.case_number), format_last_comment, ns.format)


def cmd_update_quote(ns):
    result = _get_client().update_quote(ns.case_number, ns.new_quantity)
    mutation_response(
        "Quote Updated and Attached to Case",
        ns.case_number,
        f"qty={result['qty']:g}",
        result,
        ns.format,
    )
