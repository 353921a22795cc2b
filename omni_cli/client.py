"""
OmniClient — public Python API for Epicor case operations and vault access.

Single entry point for the CLI and the MCP server.
All methods return flat dicts suitable for JSON serialization.
"""

from __future__ import annotations

import math

from omni_cli import vault
from omni_cli.api import dispatch
from omni_cli.exceptions import CliError
from omni_cli.models import (
    AddCaseCommentRequest,
    CaseStatusRequest,
    CompleteTaskRequest,
    GetLastCommentRequest,
    UpdateQuoteRequest,
)
from omni_cli.types import (
    CaseStatusResult,
    CompleteTaskResult,
    LastCommentResult,
    MutationResult,
    VaultResult,
)


def _require_text(value, field):
    text = (value or "").strip()
    if not text:
        raise CliError(f"[ERROR] {field} cannot be empty.")
    return text


def _require_quantity(value):
    try:
        qty = float(value)
    except (TypeError, ValueError):
        raise CliError(f"[ERROR] Quantity must be a number, got: {value!r}") from None
    if not math.isfinite(qty):
        raise CliError(f"[ERROR] Quantity must be a finite number, got: {value!r}")
    return qty


class OmniClient:
    """Public API surface for omni-cli.

    Raises CliError subclasses on failure; nothing is retried.
    """

    def __init__(self, *, credentials=None, vault_cli=None):
        """Initialize the client.

        Args:
            credentials: ApiCredentials to use instead of reading the
                environment on every call (tests, embedding).
            vault_cli: BitwardenCli to use instead of the default ``bw``.
        """
        self._credentials = credentials
        self._vault_cli = vault_cli

    # -------------------------------------------------------------------
    # Case commands
    # -------------------------------------------------------------------

    def complete_task(
        self, case_num: int, assign_to: str, comment: str | None = None
    ) -> CompleteTaskResult:
        """Complete the current task on a case and assign the next one.

        Args:
            case_num: Epicor case number.
            assign_to: Name of the person the next task goes to.
            comment: Optional comment, added to the case with AddCaseComment
                once the task has been completed.

        Returns:
            dict with ok, case_num, assigned_to, the four eligibility flags,
            message, comment_added, and comment_error. A failed follow-up
            comment does not undo the completion: it is reported in
            comment_error and ok stays True.
        """
        assign_to = _require_text(assign_to, "Assignee")
        resp = dispatch(CompleteTaskRequest(case_num, assign_to), self._credentials)
        result = {
            "ok": True,
            "case_num": case_num,
            "assigned_to": assign_to,
            "has_active_task": resp.has_active_task,
            "authorized_to_complete_task": resp.authorized_to_complete_task,
            "multiple_sales_rep_matches": resp.multiple_sales_rep_matches,
            "no_sales_rep_match": resp.no_sales_rep_match,
            "message": resp.message,
            "comment_added": False,
            "comment_error": None,
        }
        if comment and comment.strip():
            try:
                dispatch(AddCaseCommentRequest(case_num, comment.strip()), self._credentials)
            except CliError as e:
                result["comment_error"] = str(e)
            else:
                result["comment_added"] = True
        return result

    def get_case_status(self, case_num: int) -> CaseStatusResult:
        """Get the current status of a case (~20 descriptive fields)."""
        resp = dispatch(CaseStatusRequest(case_num), self._credentials)
        return {"ok": True, "case_num": case_num, **resp.to_dict()}

    def add_comment(self, case_num: int, comment: str) -> MutationResult:
        comment = _require_text(comment, "Comment")
        resp = dispatch(AddCaseCommentRequest(case_num, comment), self._credentials)
        return {"ok": True, "case_num": case_num, "message": resp.message}

    def get_last_comment(self, case_num: int) -> LastCommentResult:
        """Get the most recent comment. ``comment`` is None when the case has none."""
        resp = dispatch(GetLastCommentRequest(case_num), self._credentials)
        return {"ok": True, "case_num": case_num, "comment": resp.comment}

    def update_quote(self, case_num: int, new_quantity: float) -> MutationResult:
        """Set a new part quantity; Epicor regenerates and attaches the quote."""
        qty = _require_quantity(new_quantity)
        resp = dispatch(UpdateQuoteRequest(case_num, qty), self._credentials)
        return {"ok": True, "case_num": case_num, "qty": qty, "message": resp.message}

    # -------------------------------------------------------------------
    # Vault commands
    # -------------------------------------------------------------------

    def list_vault_items(self) -> VaultResult:
        return {"ok": True, "output": vault.list_items(cli=self._vault_cli)}

    def get_vault_item(self, item_type, name: str) -> VaultResult:
        name = _require_text(name, "Item name")
        return {"ok": True, "output": vault.get_item(item_type, name, cli=self._vault_cli)}
