"""
omni-cli — operator CLI for Bitwarden vault lookups and Epicor case operations
"""

import argparse
import json
import math
import sys

from omni_cli import config
from omni_cli.commands import (
    cmd_add_comment,
    cmd_complete_task,
    cmd_get_last_comment,
    cmd_get_status,
    cmd_update_quote,
    cmd_vault_get,
    cmd_vault_list,
)
from omni_cli.exceptions import (
    CliError,
    ConfigurationError,
    DecodeError,
    EndpointNotPublishedError,
    ExternalToolError,
    RemoteApplicationError,
    TransportError,
)
from omni_cli.setup_wizard import cmd_setup
from omni_cli.vault import VaultItemType

HELP_TEXT = """\
Usage: omni <command> [args...]

Global flags:
  --format table          Output as readable text instead of JSON (default: json)
  --quiet                 Suppress confirmations and warnings
  --verbose, -v           Log HTTP requests and vault steps to stderr
  --version               Show version number

Commands:
  setup                   - Write Bitwarden/Epicor settings to .env
    --bw-client-id, --bw-client-secret, --bw-master-password,
    --epicor-base-url, --epicor-api-key, --epicor-username, --epicor-password
  vault list              - List all Bitwarden vault items
  vault get               - Get one vault object
    -i, --item-type <type>  item, username, password, uri, totp, exposed,
                            attachment, folder, collection, organization,
                            org-collection, template, fingerprint
    -n, --name <name>       Name or ID of the vault item (e.g. CAEL10)
  case complete-task      - Complete the current task on a case
    -n, --case-number <n>   Epicor case number
    -a, --assign-to <name>  Who the next task should be assigned to
    -c, --comment <text>    Comment to add once the task is completed
  case add-comment        - Add a comment to a case
    -n, --case-number <n>   Epicor case number
    -c, --comment <text>    Comment text
  case get-status         - Show the current status of a case
    -n, --case-number <n>   Epicor case number
  case get-last-comment   - Show the most recent comment on a case
    -n, --case-number <n>   Epicor case number  (alias: get-comment-summary)
  case update-quote       - Update the part quantity and regenerate the quote
    -n, --case-number <n>   Epicor case number
    -q, --new-quantity <x>  New quantity for the case part
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so --format works after subcommand)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, quiet, verbose, remaining_argv).
    Handles --version directly.
    """
    fmt = "json"
    quiet = False
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        if argv[i] == "--version":
            print(f"omni-cli {config.VERSION}")
            sys.exit(0)
        elif argv[i] == "--quiet":
            quiet = True
            i += 1
            continue
        elif argv[i] in ("--verbose", "-v"):
            verbose = True
            i += 1
            continue
        elif argv[i] == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in ("json", "table"):
                raise CliError(f"[ERROR] Invalid format '{fmt}'. Use: json, table")
            i += 2
            continue
        else:
            remaining.append(argv[i])
        i += 1
    if quiet and verbose:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, quiet, verbose, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def _quantity(value):
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number") from exc
    if not math.isfinite(parsed):
        raise argparse.ArgumentTypeError("must be a finite number")
    return parsed


def _item_type(value):
    try:
        return VaultItemType.parse(value)
    except CliError as exc:
        raise argparse.ArgumentTypeError(
            f"'{value}' is not a valid vault item type "
            f"(choose from {', '.join(VaultItemType.choices())})"
        ) from exc


def _add_case_number(p):
    p.add_argument("--case-number", "-n", type=_positive_int, required=True, dest="case_number")


def build_parser():
    parser = _SubcommandParser(
        prog="omni",
        description="Operator CLI for Bitwarden vault lookups and Epicor case operations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- setup ---
    p = sub.add_parser("setup")
    p.add_argument("--bw-client-id", "-i", dest="bw_client_id")
    p.add_argument("--bw-client-secret", "-s", dest="bw_client_secret")
    p.add_argument("--bw-master-password", "-p", dest="bw_master_password")
    p.add_argument("--epicor-base-url", "-u", dest="epicor_base_url")
    p.add_argument("--epicor-api-key", "-k", dest="epicor_api_key")
    p.add_argument("--epicor-username", "-n", dest="epicor_username")
    p.add_argument("--epicor-password", "-w", dest="epicor_password")
    p.set_defaults(func=cmd_setup)

    # --- vault ---
    vault = sub.add_parser("vault")
    vault_sub = vault.add_subparsers(dest="vault_command", parser_class=_SubcommandParser)
    vault_sub.add_parser("list").set_defaults(func=cmd_vault_list)
    p = vault_sub.add_parser("get")
    p.add_argument("--item-type", "-i", type=_item_type, required=True, dest="item_type")
    p.add_argument("--name", "-n", required=True)
    p.set_defaults(func=cmd_vault_get)

    # --- case ---
    case = sub.add_parser("case")
    case_sub = case.add_subparsers(dest="case_command", parser_class=_SubcommandParser)

    p = case_sub.add_parser("complete-task")
    _add_case_number(p)
    p.add_argument("--assign-to", "-a", required=True, dest="assign_to")
    p.add_argument("--comment", "-c")
    p.set_defaults(func=cmd_complete_task)

    p = case_sub.add_parser("add-comment")
    _add_case_number(p)
    p.add_argument("--comment", "-c", required=True)
    p.set_defaults(func=cmd_add_comment)

    p = case_sub.add_parser("get-status")
    _add_case_number(p)
    p.set_defaults(func=cmd_get_status)

    p = case_sub.add_parser("get-last-comment", aliases=["get-comment-summary"])
    _add_case_number(p)
    p.set_defaults(func=cmd_get_last_comment)

    p = case_sub.add_parser("update-quote")
    _add_case_number(p)
    p.add_argument("--new-quantity", "-q", type=_quantity, required=True, dest="new_quantity")
    p.set_defaults(func=cmd_update_quote)

    # --- version (bare word) ---
    sub.add_parser("version").set_defaults(func=None)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

_ERROR_TYPES = [
    (ConfigurationError, "setup_needed"),
    (ExternalToolError, "vault_error"),
    (EndpointNotPublishedError, "not_published"),
    (TransportError, "transport_error"),
    (DecodeError, "decode_error"),
    (RemoteApplicationError, "remote_error"),
]


def _error_type(err):
    for cls, name in _ERROR_TYPES:
        if isinstance(err, cls):
            return name
    message = str(err)
    if message.startswith("[SETUP_NEEDED]"):
        return "setup_needed"
    if message.startswith("[ERROR]"):
        return "error"
    return "cli_error"


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": {
                "type": _error_type(err),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        status = getattr(err, "status", None)
        if status is not None:
            payload["error"]["status"] = status
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(msg, file=sys.stderr)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(HELP_TEXT)
        sys.exit(0)

    fmt = "json"
    try:
        fmt, quiet, verbose, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = quiet
        config.RUNTIME_VERBOSE = verbose
        if verbose:
            config.LOG_ENABLED = True

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt  # inject global format flag

        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        if ns.command == "version":
            print(f"omni-cli {config.VERSION}")
            sys.exit(0)

        handler = getattr(ns, "func", None)
        if handler is None:
            print(HELP_TEXT)
            sys.exit(0)
        handler(ns)

    except CliError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
