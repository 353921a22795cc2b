"""Typed response definitions for OmniClient methods.

These TypedDicts document the shape of dicts returned by public API methods.
They are optional — runtime behavior is unchanged (plain dicts).
"""

from __future__ import annotations

from typing import TypedDict


class CaseStatusResult(TypedDict):
    """Return type of OmniClient.get_case_status()."""

    ok: bool
    case_num: int
    error: bool
    message: str | None
    project_id: str
    case_description: str
    part_num: str
    qty: float
    unit_price: float
    case_owner: str
    internal_contact: str
    case_contact: str
    current_task: str
    current_task_assigned_to: str
    requested_delivery: str
    start_date: str
    expected_delivery_date: str
    developer: str
    wbs_phase_id: str
    wbs_phase_op: int
    estimated_hours: float
    hours_scheduled: float
    hours_applied: float
    billed_percent: float


class CompleteTaskResult(TypedDict, total=False):
    """Return type of OmniClient.complete_task()."""

    ok: bool
    case_num: int
    assigned_to: str
    has_active_task: bool
    authorized_to_complete_task: bool
    multiple_sales_rep_matches: bool
    no_sales_rep_match: bool
    message: str | None
    comment_added: bool
    comment_error: str | None


class LastCommentResult(TypedDict):
    """Return type of OmniClient.get_last_comment()."""

    ok: bool
    case_num: int
    comment: str | None


class MutationResult(TypedDict, total=False):
    """Return type of add_comment() and update_quote()."""

    ok: bool
    case_num: int
    message: str | None
    qty: float


class VaultResult(TypedDict):
    """Return type of list_vault_items() and get_vault_item()."""

    ok: bool
    output: str
