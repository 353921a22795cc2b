"""Case tools: the five Epicor case operations."""

from __future__ import annotations

from omni_cli import CliError
from omni_cli.mcp_server._core import (
    _call,
    _contract_error,
    _finalize_tool_result,
    _validate_case_num,
)


def complete_task(case_num: int, assign_to: str, comment: str | None = None) -> dict:
    """Complete the current task on a case and assign the next task.

    Args:
        assign_to: Name of the person the next task is assigned to.
        comment: Optional comment added to the case after completion.
    """
    try:
        case_num = _validate_case_num(case_num)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call("complete_task", case_num=case_num, assign_to=assign_to, comment=comment)
    )


def add_case_comment(case_num: int, comment: str) -> dict:
    """Add a comment to a case."""
    try:
        case_num = _validate_case_num(case_num)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(_call("add_comment", case_num=case_num, comment=comment))


def get_case_status(case_num: int) -> dict:
    """Get owner, contacts, part, quantity, current task and hours for a case."""
    try:
        case_num = _validate_case_num(case_num)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(_call("get_case_status", case_num=case_num))


def get_last_comment(case_num: int) -> dict:
    """Get the most recent comment on a case (comment is null when there is none)."""
    try:
        case_num = _validate_case_num(case_num)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(_call("get_last_comment", case_num=case_num))


def update_case_quote(case_num: int, new_quantity: float) -> dict:
    """Set a new part quantity on a case; Epicor regenerates the quote."""
    try:
        case_num = _validate_case_num(case_num)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _call("update_quote", case_num=case_num, new_quantity=new_quantity)
    )


def register(mcp):
    """Register all case tools with the FastMCP instance."""
    mcp.tool()(complete_task)
    mcp.tool()(add_case_comment)
    mcp.tool()(get_case_status)
    mcp.tool()(get_last_comment)
    mcp.tool()(update_case_quote)
